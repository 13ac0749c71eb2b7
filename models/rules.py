from dataclasses import dataclass, field
from typing import Iterator, List, Optional

GENERAL = "general"
AGENT = "agent"
KINDS = (GENERAL, AGENT)

@dataclass(frozen=True)
class RuleIdentifier:
    """Hierarchical key of a stored rule fragment: technology[/bucket]/kind."""
    technology: str
    kind: str = GENERAL
    bucket: Optional[str] = None # 'major.minor', 'major' or None for the base rule
    label: str = field(default="", compare=False)

    @property
    def key(self) -> str:
        parts = [self.technology]
        if self.bucket:
            parts.append(self.bucket)
        parts.append(self.kind)
        return "/".join(parts)

    @property
    def display_label(self) -> str:
        """Label used in headings and placeholders ('php 8' when no label was given)."""
        if self.label:
            return self.label
        return " ".join(p for p in (self.technology, self.bucket) if p)

    @classmethod
    def from_selector(cls, selector: str, kind: str) -> Optional["RuleIdentifier"]:
        """
        Build an identifier from a raw manual-mode selector such as 'php', 'php/8'
        or 'laravel/10/general'. No version parsing is done.

        Returns None for an empty selector or one that names the other kind.
        """
        cleaned = selector.strip().replace("\\", "/").strip("/")
        if not cleaned:
            return None
        parts = [p for p in cleaned.split("/") if p]
        if parts[-1] in KINDS:
            if parts[-1] != kind:
                return None
            parts = parts[:-1]
            if not parts:
                return None
        bucket = "/".join(parts[1:]) or None
        return cls(technology=parts[0], kind=kind, bucket=bucket)

    def __str__(self) -> str:
        return self.key


class ResolvedRuleSet:
    """Ordered, duplicate-free sequence of rule identifiers."""

    def __init__(self, identifiers: Optional[List[RuleIdentifier]] = None):
        self._items: List[RuleIdentifier] = []
        self._seen = set()
        for identifier in identifiers or []:
            self.add(identifier)

    def add(self, identifier: RuleIdentifier) -> bool:
        """Append unless the key is already present. Returns True when added."""
        if identifier.key in self._seen:
            return False
        self._seen.add(identifier.key)
        self._items.append(identifier)
        return True

    def keys(self) -> List[str]:
        return [i.key for i in self._items]

    def __iter__(self) -> Iterator[RuleIdentifier]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, key) -> bool:
        if isinstance(key, RuleIdentifier):
            key = key.key
        return key in self._seen

    def __repr__(self) -> str:
        return f"ResolvedRuleSet({self.keys()!r})"


@dataclass
class MergedSection:
    """A heading with accumulated text and de-duplicated bullets."""
    heading: str
    text: str = ""
    bullets: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Template:
    """A structured rule source: optional title plus sections."""
    name: str
    title: str = ""
    sections: List[MergedSection] = field(default_factory=list)
