"""Resolution of detected stacks and manual selectors into rule identifiers."""
import logging
from typing import Dict, Iterable, List, Optional
from core.version_utils import version_buckets
from models.detection import StackRecord
from models.rules import AGENT, GENERAL, ResolvedRuleSet, RuleIdentifier
from models.technology import Technology

logger = logging.getLogger(__name__)


class RuleResolver:
    """Turns a StackRecord (or explicit selectors) into ordered rule identifier lists.

    `store` is any rule content provider with `exists(rule_id)`.
    """

    def __init__(self, store, technologies: Optional[List[Technology]] = None):
        self.store = store
        self._labels: Dict[str, str] = {t.name: t.label for t in technologies or []}

    def resolve_general(self, stack: StackRecord) -> ResolvedRuleSet:
        """
        Cumulative resolution for the general document.

        Per detected technology, in stack order: the base rule, then the
        major.minor rule, then the major rule, each only when content exists.
        """
        resolved = ResolvedRuleSet()
        for entry in stack.detected():
            exact, major = version_buckets(entry.version)
            candidates = [RuleIdentifier(entry.name, GENERAL, None, entry.label)]
            if exact:
                candidates.append(RuleIdentifier(entry.name, GENERAL, exact, entry.label))
            if major:
                candidates.append(RuleIdentifier(entry.name, GENERAL, major, entry.label))

            for identifier in candidates:
                self._add_if_exists(resolved, identifier)
        logger.debug(f"General rules: {resolved.keys()}")
        return resolved

    def resolve_agent(self, stack: StackRecord) -> ResolvedRuleSet:
        """
        Exclusive resolution for the agent document.

        Per detected technology the first existing of major.minor, major and
        base agent rules is selected; at most one identifier per technology.
        """
        resolved = ResolvedRuleSet()
        for entry in stack.detected():
            exact, major = version_buckets(entry.version)
            buckets = [b for b in (exact, major) if b] + [None]
            for bucket in buckets:
                identifier = RuleIdentifier(entry.name, AGENT, bucket, entry.label)
                if self.store.exists(identifier.key):
                    resolved.add(identifier)
                    break
        logger.debug(f"Agent rules: {resolved.keys()}")
        return resolved

    def resolve_general_from_selectors(self, selectors: Iterable[str]) -> ResolvedRuleSet:
        """
        Manual mode for the general document: '/general' is appended to each
        selector (unless already present) with no version parsing. Identifiers
        are kept even without content so the gap shows up as a placeholder.
        """
        resolved = ResolvedRuleSet()
        for selector in selectors:
            identifier = self._from_selector(selector, GENERAL)
            if identifier is None:
                continue
            if not self.store.exists(identifier.key):
                logger.warning(f"Requested rule '{identifier.key}' does not exist")
            resolved.add(identifier)
        return resolved

    def resolve_agent_from_selectors(self, selectors: Iterable[str]) -> ResolvedRuleSet:
        """Manual mode for the agent document: '/agent' appended, only existing rules kept."""
        resolved = ResolvedRuleSet()
        for selector in selectors:
            identifier = self._from_selector(selector, AGENT)
            if identifier is not None and self.store.exists(identifier.key):
                resolved.add(identifier)
        return resolved

    def _from_selector(self, selector: str, kind: str) -> Optional[RuleIdentifier]:
        identifier = RuleIdentifier.from_selector(selector, kind)
        if identifier is None:
            return None
        label = self._labels.get(identifier.technology)
        if label:
            label = " ".join(p for p in (label, identifier.bucket) if p)
            identifier = RuleIdentifier(identifier.technology, kind, identifier.bucket, label)
        return identifier

    def _add_if_exists(self, resolved: ResolvedRuleSet, identifier: RuleIdentifier) -> None:
        if self.store.exists(identifier.key):
            resolved.add(identifier)
        else:
            logger.debug(f"No rule content for {identifier.key}, skipping")
