"""Merging of resolved rule content into the general and agent documents.

Both documents are pure functions of the resolved identifiers and the rule
store, so rendering the same stack twice gives byte-identical text.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from core.errors import MissingRuleContent
from models.detection import StackRecord
from models.rules import ResolvedRuleSet, RuleIdentifier

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n---\n\n"
AGENTS_TITLE = "# Agents"
GENERATED_NOTICE = "<!-- Generated by ai-instructions. Do not edit manually. -->"


@dataclass(frozen=True)
class Documents:
    """Rendered output of one run. `agents` is None when no agent rule resolved."""
    general: str
    agents: Optional[str] = None


def missing_placeholder(identifier: RuleIdentifier, what: str = "instructions") -> str:
    return (
        f"<!-- Missing {what} for {identifier.display_label} "
        f"(expected file: rules/{identifier.key}.md) -->"
    )


def _content_or_placeholder(store, identifier: RuleIdentifier, what: str) -> str:
    try:
        return store.get(identifier.key).strip()
    except MissingRuleContent as e:
        logger.warning(str(e))
        return missing_placeholder(identifier, what)


def merge_general(rule_set: ResolvedRuleSet, store) -> str:
    """Concatenate rule contents in order, separated by horizontal rules."""
    parts = [_content_or_placeholder(store, identifier, "instructions") for identifier in rule_set]
    return SEPARATOR.join(parts)


def merge_agent(rule_set: ResolvedRuleSet, store) -> str:
    """One '## <Label>' section per agent rule under a top-level Agents title."""
    sections = []
    for identifier in rule_set:
        body = _content_or_placeholder(store, identifier, "agent instructions")
        sections.append(f"## {identifier.display_label}\n\n{body}")

    header = f"{AGENTS_TITLE}\n\n{GENERATED_NOTICE}{SEPARATOR}"
    return header + SEPARATOR.join(sections)


def build_stack_section(stack: Optional[StackRecord]) -> str:
    """'## Stack' bullet list of detected technologies, or '' if none."""
    if stack is None:
        return ""
    lines = [f"- {entry.label}: {entry.version}" for entry in stack.detected()]
    if not lines:
        return ""
    return "## Stack\n\n" + "\n".join(lines)


def render(stack: Optional[StackRecord], merged_general: str) -> str:
    """Prepend the stack summary (when anything was detected) to the merged body."""
    section = build_stack_section(stack)
    if not section:
        return merged_general
    return section + SEPARATOR + merged_general


def build_documents(stack: Optional[StackRecord], general: ResolvedRuleSet, agents: ResolvedRuleSet, store) -> Documents:
    """
    Render both documents for one run.

    `stack` is None in manual mode, where no stack section is rendered.
    """
    general_text = render(stack, merge_general(general, store)) if general else ""
    agents_text = merge_agent(agents, store) if agents else None
    return Documents(general=general_text, agents=agents_text)
