"""Readers for npm marker files."""
from core.reader_registry import MarkerReaderRegistry
from readers.json_marker import JsonMarkerReader


@MarkerReaderRegistry.register("package.json", reader_kind="manifest")
class PackageJsonReader(JsonMarkerReader):
    filename = "package.json"


@MarkerReaderRegistry.register("package-lock.json", reader_kind="lock")
class PackageLockReader(JsonMarkerReader):
    """package-lock.json: lockfile v1 'dependencies' and v2/v3 'packages' entries."""

    filename = "package-lock.json"
