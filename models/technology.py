from dataclasses import dataclass, field
from typing import List, Optional, Tuple

@dataclass(frozen=True)
class MarkerRule:
    """Defines where a technology's version lives inside a marker file."""
    file: str # e.g., 'composer.json', 'package-lock.json'
    path: Tuple[str, ...] = () # Key path into the parsed document (e.g., ('require', 'php'))
    package: Optional[str] = None # Package name to look up in a lock file's package lists

@dataclass(frozen=True)
class Technology:
    """Represents a recognized technology and its marker rules."""
    name: str # Identifier used in rule keys (e.g., 'nuxt_ui')
    label: str # Human readable name (e.g., 'Nuxt UI')
    markers: List[MarkerRule] = field(default_factory=list)

    def markers_for(self, filename: str) -> List[MarkerRule]:
        return [m for m in self.markers if m.file == filename]
