"""Comparison of generated documents against files already on disk."""
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    UP_TO_DATE = "Up to date"
    MISSING = "Missing"
    OUTDATED = "Outdated"

    def __str__(self) -> str:
        return self.value


def normalize_document(text: str) -> str:
    """Normalize line endings and surrounding whitespace before comparing."""
    return text.replace("\r\n", "\n").strip()


def compare_file_status(path: str, expected: str) -> FileStatus:
    """Return whether the file at `path` is missing, outdated, or up to date."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            current = f.read()
    except FileNotFoundError:
        return FileStatus.MISSING
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable files count as outdated
        logger.warning(f"Cannot read {path}: {e}")
        return FileStatus.OUTDATED

    if normalize_document(current) == normalize_document(expected):
        return FileStatus.UP_TO_DATE
    return FileStatus.OUTDATED
