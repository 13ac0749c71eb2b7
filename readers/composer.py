"""Readers for Composer (PHP) marker files."""
from typing import Any, Dict, Optional
from core.reader_registry import MarkerReaderRegistry
from models.technology import MarkerRule
from readers.json_marker import JsonMarkerReader, lookup_path

# Lock file lists searched for a package, in order
LOCK_PACKAGE_LISTS = ("packages", "packages-dev")


@MarkerReaderRegistry.register("composer.json", reader_kind="manifest")
class ComposerManifestReader(JsonMarkerReader):
    """composer.json: platform pin (config.platform.php) before require constraints."""

    filename = "composer.json"


@MarkerReaderRegistry.register("composer.lock", reader_kind="lock")
class ComposerLockReader(JsonMarkerReader):
    """composer.lock: exact installed versions for packages, plus platform requirements."""

    filename = "composer.lock"

    def _extract(self, data: Dict[str, Any], marker: MarkerRule) -> Optional[str]:
        if marker.package:
            return self._find_package_version(data, marker.package)
        return super()._extract(data, marker)

    def _find_package_version(self, data: Dict[str, Any], package: str) -> Optional[str]:
        for list_name in LOCK_PACKAGE_LISTS:
            entries = data.get(list_name)
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if isinstance(entry, dict) and entry.get("name") == package:
                    return lookup_path(entry, ("version",))
        return None
