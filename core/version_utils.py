"""
Utility functions for turning version constraints from marker files into
rule version buckets.
"""
import re
from typing import Optional, Tuple


# Range operators and whitespace allowed in front of a constraint (^8.2, >= 8.2, ~1.0)
RANGE_OPERATORS = "^~<>= \t"

# Leading run of digits and dots (8.2.x -> 8.2.)
NUMERIC_PREFIX = re.compile(r'^[0-9.]*')


def normalize_version(version: Optional[str]) -> str:
    """
    Best-effort reduction of a version constraint to its leading numeric part.

    Examples:
        - "^8.2.1" -> "8.2.1"
        - ">=8.2 <9" -> "8.2"
        - "8.2.x" -> "8.2"
        - "^8.1 || ^8.2" -> "8.1"
        - "v10.2.0" -> "10.2.0"
        - "*" -> ""

    Args:
        version: Raw version string from a manifest or lock file

    Returns:
        Normalized version, or an empty string if nothing numeric was found
    """
    if not version:
        return ""

    # Only the first alternative of an OR constraint counts
    version = version.split("||")[0]

    version = version.strip().lstrip(RANGE_OPERATORS)
    if version[:1] in ("v", "V"):
        version = version[1:]

    tokens = version.split()
    if not tokens:
        return ""

    match = NUMERIC_PREFIX.match(tokens[0])
    return match.group(0).strip(".") if match else ""


def split_version(version: Optional[str]) -> Tuple[str, str]:
    """
    Return (major, minor) of a raw version constraint.

    Missing components are empty strings, so "^8" gives ("8", "") and "*"
    gives ("", "").
    """
    normalized = normalize_version(version)
    if not normalized:
        return "", ""

    parts = normalized.split(".")
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else ""
    return major, minor


def version_buckets(version: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Version buckets for rule lookup: ("major.minor", "major").

    Either is None when the version does not carry enough components.
    """
    major, minor = split_version(version)
    exact = f"{major}.{minor}" if major and minor else None
    return exact, major or None
