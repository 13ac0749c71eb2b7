import os
import logging
import yaml
from typing import List, Dict, Any
from models.technology import Technology, MarkerRule
from models.rules import Template, MergedSection

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
TECHNOLOGIES_FILE = os.path.join(RULES_DIR, "technologies.yaml")
TEMPLATES_DIR = os.path.join(RULES_DIR, "templates")
TEMPLATE_SUFFIXES = (".yaml", ".yml")


def load_technologies(path: str = TECHNOLOGIES_FILE) -> List[Technology]:
    """
    Loads the technology registry from a YAML file, preserving file order.
    """
    with open(path, "r", encoding="utf-8") as f:
        entries = yaml.safe_load(f)
    if not entries:
        return []

    technologies: List[Technology] = []
    for entry in entries:
        # Basic validation
        if not all(k in entry for k in ["name", "label", "markers"]):
            logger.warning(f"Skipping invalid technology in {path}: {entry}")
            continue

        markers = []
        for marker in entry["markers"]:
            if not marker.get("file") or not (marker.get("path") or marker.get("package")):
                logger.warning(f"Skipping invalid marker for {entry['name']}: {marker}")
                continue
            markers.append(
                MarkerRule(
                    file=marker["file"],
                    path=tuple(str(p) for p in marker.get("path") or ()),
                    package=marker.get("package"),
                )
            )

        technologies.append(
            Technology(
                name=str(entry["name"]),
                label=str(entry["label"]),
                markers=markers,
            )
        )
    logger.debug(f"Loaded {len(technologies)} technologies from {path}")
    return technologies


def list_template_names(templates_dir: str = TEMPLATES_DIR) -> List[str]:
    """Names of the structured templates available for composing."""
    if not os.path.isdir(templates_dir):
        return []
    return sorted({
        os.path.splitext(f)[0]
        for f in os.listdir(templates_dir)
        if f.endswith(TEMPLATE_SUFFIXES)
    })


def load_template(name: str, templates_dir: str = TEMPLATES_DIR) -> Template:
    """
    Loads one structured template (title + sections of heading/text/bullets).

    Raises:
        FileNotFoundError: if no template with that name exists
        ValueError: if the file is empty or not a mapping with sections
    """
    candidates = [os.path.join(templates_dir, name + suffix) for suffix in TEMPLATE_SUFFIXES]
    path = next((p for p in candidates if os.path.isfile(p)), None)
    if path is None:
        raise FileNotFoundError(f"No template named '{name}' in {templates_dir}")
    with open(path, "r", encoding="utf-8") as f:
        data: Dict[str, Any] = yaml.safe_load(f)

    if not isinstance(data, dict) or not isinstance(data.get("sections"), list):
        raise ValueError(f"Template {path} must be a mapping with a 'sections' list")

    sections = [
        MergedSection(
            heading=str(s.get("heading") or ""),
            text=str(s.get("text") or ""),
            bullets=[str(b) for b in s.get("bullets") or []],
        )
        for s in data["sections"]
        if isinstance(s, dict)
    ]
    return Template(name=name, title=str(data.get("title") or ""), sections=sections)
