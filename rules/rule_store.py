"""Read-only store of Markdown rule fragments bundled with the tool."""
import os
import logging
from typing import Dict, List, Optional

from core.errors import MissingRuleContent, RuleStoreError

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
RULE_SUFFIX = ".md"


class RuleStore:
    """
    Rule content keyed by identifier (path relative to the store root without
    the .md suffix), e.g. 'php/8/general' -> rules/php/8/general.md.
    """

    def __init__(self, root: str = RULES_DIR):
        if not os.path.isdir(root):
            raise RuleStoreError(root)
        self.root = root
        self._cache: Dict[str, str] = {}

    def _path_for(self, rule_id: str) -> Optional[str]:
        rule_id = rule_id.replace("\\", "/").strip("/")
        parts = rule_id.split("/")
        if not rule_id or any(p in ("", ".", "..") for p in parts):
            return None
        return os.path.join(self.root, *parts) + RULE_SUFFIX

    def get(self, rule_id: str) -> str:
        """
        Return the content of a rule.

        Raises:
            MissingRuleContent: if no file backs the identifier
        """
        if rule_id in self._cache:
            return self._cache[rule_id]

        path = self._path_for(rule_id)
        if path is None or not os.path.isfile(path):
            raise MissingRuleContent(rule_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read rule file {path}: {e}")
            raise MissingRuleContent(rule_id) from e

        self._cache[rule_id] = content
        return content

    def exists(self, rule_id: str) -> bool:
        path = self._path_for(rule_id)
        return path is not None and os.path.isfile(path)

    def list_ids(self) -> List[str]:
        """All rule identifiers in the store, sorted."""
        ids = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [d for d in dirnames if not d.startswith((".", "_"))]
            for filename in filenames:
                if not filename.endswith(RULE_SUFFIX):
                    continue
                rel = os.path.relpath(os.path.join(dirpath, filename), self.root)
                ids.append(rel[: -len(RULE_SUFFIX)].replace(os.sep, "/"))
        return sorted(ids)
