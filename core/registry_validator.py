"""
Utility functions to validate the technology registry for duplications and
marker files no reader understands.
"""

from typing import Dict, List, Iterable
from collections import defaultdict
from models.technology import Technology


def detect_duplicate_technologies(technologies: List[Technology]) -> Dict[str, int]:
    """
    Detect technology ids declared more than once.

    Returns:
        Dictionary with technology ids as keys and their declaration count as values
    """
    counts = defaultdict(int)
    for tech in technologies:
        counts[tech.name] += 1
    return {name: count for name, count in counts.items() if count > 1}


def detect_unhandled_markers(
    technologies: List[Technology],
    handled_files: Iterable[str],
) -> Dict[str, List[str]]:
    """
    Detect marker files referenced by the registry without a registered reader.

    Returns:
        Dictionary with marker file names as keys and technology ids as values
    """
    handled = set(handled_files)
    unhandled = defaultdict(list)
    for tech in technologies:
        for marker in tech.markers:
            if marker.file not in handled and tech.name not in unhandled[marker.file]:
                unhandled[marker.file].append(tech.name)
    return dict(unhandled)


def detect_marker_overlaps(technologies: List[Technology]) -> Dict[str, List[str]]:
    """
    Detect marker files shared by several technologies (informational).

    Returns:
        Dictionary with marker file names as keys and list of technology ids as values
    """
    files_map = defaultdict(list)
    for tech in technologies:
        for marker in tech.markers:
            if tech.name not in files_map[marker.file]:
                files_map[marker.file].append(tech.name)

    return {
        filename: names
        for filename, names in files_map.items()
        if len(names) > 1
    }


def validate_registry(technologies: List[Technology], handled_files: Iterable[str]) -> List[str]:
    """
    Return human readable problems with the registry; an empty list means valid.
    """
    problems = []
    if not technologies:
        problems.append("technology registry is empty")

    for name, count in sorted(detect_duplicate_technologies(technologies).items()):
        problems.append(f"technology '{name}' declared {count} times")

    for filename, names in sorted(detect_unhandled_markers(technologies, handled_files).items()):
        problems.append(f"no reader registered for '{filename}' (used by {', '.join(names)})")

    return problems


def format_registry_report(technologies: List[Technology], handled_files: Iterable[str]) -> str:
    """Multi-line report of the registry, used by `list --check`."""
    handled_files = list(handled_files)
    lines = ["Technologies:"]
    for tech in technologies:
        files = sorted({m.file for m in tech.markers})
        lines.append(f"  - {tech.name} ({tech.label}): {', '.join(files)}")

    overlaps = detect_marker_overlaps(technologies)
    if overlaps:
        lines.append("")
        lines.append("Shared marker files:")
        for filename, names in sorted(overlaps.items()):
            lines.append(f"  '{filename}' -> {', '.join(names)}")

    problems = validate_registry(technologies, handled_files)
    lines.append("")
    if problems:
        lines.append(f"Problems: {len(problems)}")
        lines.extend(f"  ⚠ {p}" for p in problems)
    else:
        lines.append("✓ Registry is valid")
    return "\n".join(lines)
