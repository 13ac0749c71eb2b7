"""Shared JSON marker file handling for all readers."""
from typing import Any, Dict, List, Optional
import json
import logging
import os
from core.errors import MalformedMarkerFile
from models.detection import Finding
from models.technology import Technology, MarkerRule

logger = logging.getLogger(__name__)


class JsonMarkerReader:
    """Reads one JSON marker file and extracts versions by key path."""

    filename = ""

    def __init__(self, technologies: List[Technology]):
        self.technologies = technologies

    def read(self, directory: str) -> List[Finding]:
        """
        Extract findings from the marker file in `directory`.

        Returns an empty list when the file does not exist. For each
        technology the first marker rule that yields a version wins.

        Raises:
            MalformedMarkerFile: if the file exists but is not a JSON object
        """
        path = os.path.join(directory, self.filename)
        data = self._load(path)
        if data is None:
            return []

        findings: List[Finding] = []
        for tech in self.technologies:
            for marker in tech.markers_for(self.filename):
                version = self._extract(data, marker)
                if version:
                    logger.debug(f"{self.filename}: {tech.name} = {version} ({path})")
                    findings.append(Finding(technology=tech.name, version=version, source=path))
                    break
        return findings

    def _load(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                raw = f.read()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None
        except UnicodeDecodeError as e:
            raise MalformedMarkerFile(path, f"not valid UTF-8 ({e})") from e
        except OSError as e:
            raise MalformedMarkerFile(path, e.strerror or str(e)) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedMarkerFile(path, f"invalid JSON ({e})") from e

        if not isinstance(data, dict):
            raise MalformedMarkerFile(path, "top-level value is not an object")
        return data

    def _extract(self, data: Dict[str, Any], marker: MarkerRule) -> Optional[str]:
        if not marker.path:
            return None
        return lookup_path(data, marker.path)


def lookup_path(data: Any, path) -> Optional[str]:
    """Follow a key path through nested objects; only string or number leaves count."""
    node = data
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]

    if isinstance(node, bool):
        return None
    if isinstance(node, (int, float)):
        node = str(node)
    if isinstance(node, str) and node.strip():
        return node.strip()
    return None
