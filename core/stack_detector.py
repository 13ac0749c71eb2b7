import logging
import os
from typing import Iterable, List, Optional
from core.errors import MalformedMarkerFile, UnreadableSubtree, UnreadableTree
from core.reader_registry import MarkerReaderRegistry
from core.stack_aggregator import StackAggregator

# Import all readers to trigger @MarkerReaderRegistry.register decorators
import readers.composer
import readers.npm

from models.detection import StackRecord
from models.technology import Technology
from rules.rules_loader import load_technologies

# Dependency and vendor directories never scanned (dot-directories are skipped as well)
IGNORED_DIRS = frozenset({"node_modules", "vendor", "composer"})


class StackDetector:
    def __init__(self, technologies: Optional[List[Technology]] = None, exclude_dirs: Iterable[str] = ()):
        """Initialize the detector with the technology registry and registered readers.

        Args:
            technologies: Technology registry (loaded from rules/technologies.yaml if omitted)
            exclude_dirs: Extra directory names to prune during the walk
        """
        self.logger = logging.getLogger(__name__)
        self.technologies = technologies if technologies is not None else load_technologies()
        self.readers = MarkerReaderRegistry.instantiate_all(self.technologies)
        self.ignored_dirs = IGNORED_DIRS | frozenset(exclude_dirs)
        self.skipped: List[UnreadableSubtree] = []
        self.logger.debug(f"Initialized {len(self.readers)} marker readers: {', '.join(self.readers)}")

    def detect(self, project_root: str) -> StackRecord:
        """
        Detect the project stack.

        The root is read first so its findings always win; then every
        subdirectory is visited depth-first in lexical order, pruning hidden
        and dependency directories. The first version found per technology
        is kept.

        Raises:
            UnreadableTree: if the project root cannot be listed
            MalformedMarkerFile: if a marker file at the root cannot be parsed
        """
        self.skipped = []
        try:
            root_entries = self._list_dir(project_root)
        except OSError as e:
            raise UnreadableTree(project_root, e.strerror or str(e)) from e

        aggregator = StackAggregator(self.technologies)

        # Root pass: every reader runs, and a malformed root marker aborts detection
        self.logger.debug(f"Reading markers at project root {project_root}")
        for filename, reader in self.readers.items():
            aggregator.add_all(reader.read(project_root))

        # Walk subdirectories, depth-first, pre-order
        pending = list(reversed(self._subdirectories(root_entries)))
        while pending:
            directory = pending.pop()
            try:
                entries = self._list_dir(directory)
            except OSError as e:
                skipped = UnreadableSubtree(directory, e.strerror or str(e))
                self.logger.warning(str(skipped))
                self.skipped.append(skipped)
                continue

            present = {entry.name for entry in entries if self._is_file(entry)}
            self._read_markers(directory, present, aggregator)
            pending.extend(reversed(self._subdirectories(entries)))

        stack = aggregator.freeze()
        self.logger.info(f"Detected {len(stack.detected())} technologies in {project_root}")
        return stack

    def _read_markers(self, directory: str, present: set, aggregator: StackAggregator) -> None:
        """Run readers for the marker files present in a subdirectory (manifests before locks)."""
        for filename, reader in self.readers.items():
            if filename not in present:
                continue
            try:
                findings = reader.read(directory)
            except MalformedMarkerFile as e:
                self.logger.warning(f"{e} (skipped)")
                continue
            aggregator.add_all(findings)

    def _subdirectories(self, entries: List[os.DirEntry]) -> List[str]:
        subdirs = []
        for entry in entries:
            if not self._is_dir(entry):
                continue
            if entry.name.startswith(".") or entry.name in self.ignored_dirs:
                self.logger.debug(f"Pruning {entry.path}")
                continue
            subdirs.append(entry.path)
        return subdirs

    @staticmethod
    def _list_dir(path: str) -> List[os.DirEntry]:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)

    @staticmethod
    def _is_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False

    @staticmethod
    def _is_file(entry: os.DirEntry) -> bool:
        try:
            return entry.is_file()
        except OSError:
            return False
