from dataclasses import dataclass
from typing import List, Optional, Tuple

@dataclass(frozen=True)
class Finding:
    """A version string read for a technology from one marker file."""
    technology: str
    version: str
    source: Optional[str] = None # Path of the marker file the version came from

@dataclass(frozen=True)
class StackEntry:
    name: str
    label: str
    version: str = "" # Empty means not detected

@dataclass(frozen=True)
class StackRecord:
    """Canonical detected stack, one entry per registry technology, in registry order."""
    entries: Tuple[StackEntry, ...] = ()

    def get(self, name: str) -> str:
        for entry in self.entries:
            if entry.name == name:
                return entry.version
        return ""

    def detected(self) -> List[StackEntry]:
        """Entries with a non-empty version."""
        return [e for e in self.entries if e.version]

    def is_empty(self) -> bool:
        return not self.detected()
