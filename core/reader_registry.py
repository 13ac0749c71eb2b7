"""Dynamic marker reader registration system."""
import logging
from typing import Dict, Type, List
from models.technology import Technology

logger = logging.getLogger(__name__)

READER_KINDS = ("manifest", "lock")


class MarkerReaderRegistry:
    """Registry mapping marker file names to the reader classes that parse them."""

    _readers: Dict[str, Type] = {}
    _order: List[str] = []  # Preserve registration order
    _reader_kinds: Dict[str, str] = {}  # Maps marker file name to "manifest" or "lock"

    @classmethod
    def register(cls, filename: str, reader_kind: str = "manifest"):
        """Decorator to register a marker reader class.

        Each reader is handed only the technologies that declare a marker
        for `filename`.

        Args:
            filename: Marker file the reader parses (e.g., "composer.json")
            reader_kind: Either "manifest" (default) or "lock". Within a directory,
                manifest readers always run before lock readers.

        Example:
            @MarkerReaderRegistry.register("composer.json")
            class ComposerManifestReader(JsonMarkerReader):
                filename = "composer.json"
        """
        if reader_kind not in READER_KINDS:
            raise ValueError(f"reader_kind must be 'manifest' or 'lock', got {reader_kind}")

        def decorator(reader_class: Type):
            if filename in cls._readers:
                logger.warning(f"Reader for '{filename}' already registered, overwriting")
            else:
                cls._order.append(filename)

            cls._readers[filename] = reader_class
            cls._reader_kinds[filename] = reader_kind

            logger.debug(f"Registered reader: {filename} ({reader_kind}) -> {reader_class.__name__}")
            return reader_class
        return decorator

    @classmethod
    def get_all_filenames(cls) -> List[str]:
        """Marker file names in dispatch order: manifests first, then lock files."""
        manifests = [f for f in cls._order if cls._reader_kinds[f] == "manifest"]
        locks = [f for f in cls._order if cls._reader_kinds[f] == "lock"]
        return manifests + locks

    @classmethod
    def get_reader_kind(cls, filename: str) -> str:
        return cls._reader_kinds.get(filename, "manifest")

    @classmethod
    def instantiate_all(cls, technologies: List[Technology]) -> Dict[str, object]:
        """Instantiate registered readers with the technologies relevant to each.

        Readers with no relevant technology are skipped.

        Returns:
            Dictionary mapping marker file name to reader, in dispatch order
        """
        instances = {}

        for filename in cls.get_all_filenames():
            relevant = filter_by_marker_file(technologies, filename)
            if not relevant:
                logger.debug(f"No technologies use {filename}, skipping reader")
                continue

            instances[filename] = cls._readers[filename](relevant)
            logger.debug(f"Instantiated reader for {filename}: {len(relevant)} technologies")

        return instances


def filter_by_marker_file(technologies: List[Technology], filename: str) -> List[Technology]:
    """Helper to keep only technologies with marker rules for a file.

    Args:
        technologies: Full technology registry
        filename: Marker file name (e.g., "package.json")

    Returns:
        Technology objects containing only the marker rules for `filename`
    """
    filtered = []
    for tech in technologies:
        matching = tech.markers_for(filename)
        if matching:
            filtered.append(
                Technology(
                    name=tech.name,
                    label=tech.label,
                    markers=matching,
                )
            )
    return filtered
