import pytest
from core.rule_resolver import RuleResolver
from models.detection import StackEntry, StackRecord
from models.rules import AGENT, GENERAL, ResolvedRuleSet, RuleIdentifier
from rules.rules_loader import load_technologies


def _stack(**versions):
    return StackRecord(entries=tuple(
        StackEntry(name=name, label=name.upper(), version=version)
        for name, version in versions.items()
    ))


@pytest.fixture
def full_store(make_store):
    return make_store({
        "fw/general": "base",
        "fw/5/general": "major",
        "fw/5.3/general": "minor",
        "fw/agent": "base agent",
        "fw/5/agent": "major agent",
        "fw/5.3/agent": "minor agent",
    })


def test_general_is_cumulative(full_store):
    resolved = RuleResolver(full_store).resolve_general(_stack(fw="^5.3.2"))
    # Order is base, major.minor, major: the minor bucket precedes the major one
    assert resolved.keys() == ["fw/general", "fw/5.3/general", "fw/5/general"]


def test_general_skips_missing_buckets(make_store):
    store = make_store({"A/general": "base", "A/2/general": "two"})
    resolved = RuleResolver(store).resolve_general(_stack(A="2.1.0"))
    assert resolved.keys() == ["A/general", "A/2/general"]


def test_general_without_numeric_version_uses_base_only(full_store):
    resolved = RuleResolver(full_store).resolve_general(_stack(fw="dev-main"))
    assert resolved.keys() == ["fw/general"]


def test_undetected_technologies_are_ignored(full_store):
    resolved = RuleResolver(full_store).resolve_general(_stack(fw="", other="1.0"))
    assert len(resolved) == 0


def test_agent_is_exclusive_and_most_specific(full_store):
    resolved = RuleResolver(full_store).resolve_agent(_stack(fw="5.3"))
    assert resolved.keys() == ["fw/5.3/agent"]


def test_agent_falls_back_to_major_then_base(make_store):
    store = make_store({"fw/agent": "base agent", "fw/5/agent": "major agent"})
    resolver = RuleResolver(store)

    assert resolver.resolve_agent(_stack(fw="5.9")).keys() == ["fw/5/agent"]
    assert resolver.resolve_agent(_stack(fw="6.0")).keys() == ["fw/agent"]
    assert resolver.resolve_agent(_stack(fw="*")).keys() == ["fw/agent"]


def test_agent_labels_come_from_stack(full_store):
    resolved = RuleResolver(full_store).resolve_agent(_stack(fw="5"))
    assert [i.display_label for i in resolved] == ["FW"]


def test_manual_general_keeps_missing_selectors(full_store):
    resolver = RuleResolver(full_store)
    resolved = resolver.resolve_general_from_selectors(["fw/5", " fw/9 ", "", "fw/5.3/general", "fw/agent"])
    assert resolved.keys() == ["fw/5/general", "fw/9/general", "fw/5.3/general"]


def test_manual_general_deduplicates(full_store):
    resolved = RuleResolver(full_store).resolve_general_from_selectors(["fw", "fw/general", "fw"])
    assert resolved.keys() == ["fw/general"]


def test_manual_agent_keeps_only_existing(full_store):
    resolved = RuleResolver(full_store).resolve_agent_from_selectors(["fw/5", "fw/9", "fw"])
    assert resolved.keys() == ["fw/5/agent", "fw/agent"]


def test_manual_mode_does_not_parse_versions(full_store):
    """'fw/5.3.1' is looked up literally, never reduced to 5.3."""
    resolved = RuleResolver(full_store).resolve_agent_from_selectors(["fw/5.3.1"])
    assert len(resolved) == 0


def test_manual_labels_use_registry(make_store):
    store = make_store({"php/8/agent": "x"})
    resolver = RuleResolver(store, load_technologies())
    resolved = resolver.resolve_agent_from_selectors(["php/8"])
    assert [i.display_label for i in resolved] == ["PHP 8"]


def test_resolved_rule_set_keeps_first_occurrence():
    rule_set = ResolvedRuleSet()
    assert rule_set.add(RuleIdentifier("php", GENERAL, "8", "first"))
    assert not rule_set.add(RuleIdentifier("php", GENERAL, "8", "second"))
    assert [i.label for i in rule_set] == ["first"]
    assert "php/8/general" in rule_set


def test_rule_identifier_from_selector():
    assert RuleIdentifier.from_selector("php\\8\\", GENERAL).key == "php/8/general"
    assert RuleIdentifier.from_selector("laravel/11/agent", AGENT).key == "laravel/11/agent"
    assert RuleIdentifier.from_selector("laravel/11/agent", GENERAL) is None
    assert RuleIdentifier.from_selector("general", GENERAL) is None
    assert RuleIdentifier.from_selector("   ", AGENT) is None
    assert RuleIdentifier.from_selector("php/8", AGENT).display_label == "php 8"
