"""Stack aggregation module for combining findings from many marker files.

Findings arrive in scan order (root first, then the directory walk). The first
non-empty version recorded for a technology is kept; later findings for the
same technology are ignored, so a nested project can never overwrite the root.
"""
from typing import Dict, Iterable, List
from models.detection import Finding, StackEntry, StackRecord
from models.technology import Technology
import logging

logger = logging.getLogger(__name__)


class StackAggregator:
    """Mutable builder used during one detection pass, frozen into a StackRecord."""

    def __init__(self, technologies: List[Technology]):
        self.technologies = technologies
        self._versions: Dict[str, str] = {}
        self._sources: Dict[str, str] = {}
        self._frozen = False

    def add(self, finding: Finding) -> bool:
        """
        Record a finding unless its technology already has a version.

        Returns:
            True if the finding was recorded
        """
        if self._frozen:
            raise RuntimeError("StackAggregator already frozen")
        if not finding.version:
            return False

        current = self._versions.get(finding.technology)
        if current:
            if current != finding.version:
                logger.debug(
                    f"Ignoring {finding.technology} {finding.version} from {finding.source}: "
                    f"already {current} from {self._sources.get(finding.technology)}"
                )
            return False

        self._versions[finding.technology] = finding.version
        self._sources[finding.technology] = finding.source or ""
        logger.debug(f"Detected {finding.technology} {finding.version} ({finding.source})")
        return True

    def add_all(self, findings: Iterable[Finding]) -> int:
        """Record several findings in order; returns how many were kept."""
        return sum(1 for f in findings if self.add(f))

    def freeze(self) -> StackRecord:
        """Finish the pass and return the immutable record in registry order."""
        self._frozen = True
        return StackRecord(
            entries=tuple(
                StackEntry(
                    name=tech.name,
                    label=tech.label,
                    version=self._versions.get(tech.name, ""),
                )
                for tech in self.technologies
            )
        )
