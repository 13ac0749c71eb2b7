"""Utility module for loading per-project settings from YAML files."""
import os
import logging
import yaml
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from core.errors import ConfigError

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILES = (".ai-instructions.yaml", ".ai-instructions.yml")

DEFAULT_GENERAL_OUTPUT = os.path.join(".github", "copilot-instructions.md")
DEFAULT_AGENTS_OUTPUT = "AGENTS.md"


@dataclass(frozen=True)
class ProjectConfig:
    """Settings read from .ai-instructions.yaml at the project root."""
    output: str = DEFAULT_GENERAL_OUTPUT
    agents_output: str = DEFAULT_AGENTS_OUTPUT
    exclude_dirs: List[str] = field(default_factory=list)
    rules: List[str] = field(default_factory=list)
    source: Optional[str] = None


def load_config(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to the YAML configuration file

    Returns:
        Dictionary containing the configuration data (empty if the file is missing)

    Raises:
        ConfigError: if the file cannot be read, is not valid YAML, or is not a mapping
    """
    if not os.path.exists(config_file):
        return {}

    try:
        with open(config_file, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(config_file, f"invalid YAML ({e})") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(config_file, str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(config_file, "top-level value must be a mapping")
    return data


def _string_list(data: Dict[str, Any], key: str, config_file: str) -> List[str]:
    value = data.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(config_file, f"'{key}' must be a list")
    return [str(v) for v in value if str(v).strip()]


def load_project_config(project_root: str) -> ProjectConfig:
    """
    Load the optional project configuration from `project_root`.

    Relative output paths are kept relative to the project root.
    """
    for name in PROJECT_CONFIG_FILES:
        config_file = os.path.join(project_root, name)
        if not os.path.exists(config_file):
            continue

        data = load_config(config_file)
        logger.info(f"Loaded project config from {config_file}")
        return ProjectConfig(
            output=str(data.get("output") or DEFAULT_GENERAL_OUTPUT),
            agents_output=str(data.get("agents_output") or DEFAULT_AGENTS_OUTPUT),
            exclude_dirs=_string_list(data, "exclude_dirs", config_file),
            rules=_string_list(data, "rules", config_file),
            source=config_file,
        )

    return ProjectConfig()
