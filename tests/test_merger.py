from core.merger import (
    SEPARATOR,
    build_documents,
    build_stack_section,
    merge_agent,
    merge_general,
    render,
)
from core.rule_resolver import RuleResolver
from models.detection import StackEntry, StackRecord
from models.rules import AGENT, GENERAL, ResolvedRuleSet, RuleIdentifier


def _stack(*entries):
    return StackRecord(entries=tuple(StackEntry(name=n, label=l, version=v) for n, l, v in entries))


def test_merge_general_joins_with_separator(make_store):
    store = make_store({"a/general": "# A\n", "a/2/general": "## A 2\n"})
    rule_set = ResolvedRuleSet([RuleIdentifier("a", GENERAL), RuleIdentifier("a", GENERAL, "2")])

    assert merge_general(rule_set, store) == "# A" + SEPARATOR + "## A 2"


def test_merge_general_missing_content_becomes_placeholder(make_store):
    store = make_store({"a/general": "# A"})
    rule_set = ResolvedRuleSet([RuleIdentifier("a", GENERAL), RuleIdentifier("b", GENERAL, "9")])

    merged = merge_general(rule_set, store)

    assert merged == (
        "# A" + SEPARATOR +
        "<!-- Missing instructions for b 9 (expected file: rules/b/9/general.md) -->"
    )


def test_manual_missing_selector_produces_placeholder(make_store):
    store = make_store({"php/general": "# PHP"})
    resolver = RuleResolver(store)
    docs = build_documents(
        None,
        resolver.resolve_general_from_selectors(["php", "rust/1"]),
        resolver.resolve_agent_from_selectors(["php", "rust/1"]),
        store,
    )

    assert "rules/rust/1/general.md" in docs.general
    assert docs.general.startswith("# PHP")
    assert docs.agents is None


def test_merge_agent_layout(make_store):
    store = make_store({"php/8/agent": "Use PHP 8.\n", "vue/agent": "Use Vue."})
    rule_set = ResolvedRuleSet([
        RuleIdentifier("php", AGENT, "8", "PHP"),
        RuleIdentifier("vue", AGENT, None, "Vue"),
        RuleIdentifier("nuxt", AGENT, None, "Nuxt"),
    ])

    merged = merge_agent(rule_set, store)

    assert merged == (
        "# Agents\n\n"
        "<!-- Generated by ai-instructions. Do not edit manually. -->\n\n---\n\n"
        "## PHP\n\nUse PHP 8."
        "\n\n---\n\n"
        "## Vue\n\nUse Vue."
        "\n\n---\n\n"
        "## Nuxt\n\n<!-- Missing agent instructions for Nuxt (expected file: rules/nuxt/agent.md) -->"
    )


def test_stack_section_lists_only_detected():
    stack = _stack(("php", "PHP", "^8.2"), ("laravel", "Laravel", ""), ("vue", "Vue", "3.4.0"))
    assert build_stack_section(stack) == "## Stack\n\n- PHP: ^8.2\n- Vue: 3.4.0"


def test_render_without_detection_is_unchanged():
    assert render(_stack(("php", "PHP", "")), "body") == "body"
    assert render(None, "body") == "body"


def test_nested_api_scenario(make_store):
    """Root has no manifests; api/ declares A 2.1.0; content exists at A/general and A/2/general."""
    store = make_store({"A/general": "base A", "A/2/general": "A two"})
    stack = _stack(("A", "A", "2.1.0"))
    resolver = RuleResolver(store)

    docs = build_documents(stack, resolver.resolve_general(stack), resolver.resolve_agent(stack), store)

    assert docs.general == "## Stack\n\n- A: 2.1.0" + SEPARATOR + "base A" + SEPARATOR + "A two"
    assert docs.agents is None


def test_rendering_is_idempotent(make_store):
    store = make_store({
        "php/general": "php base",
        "php/8/general": "php 8",
        "php/8/agent": "php agent",
        "vue/general": "vue base",
    })
    stack = _stack(("php", "PHP", "^8.2"), ("vue", "Vue", "^3.4"))

    def run():
        resolver = RuleResolver(store)
        return build_documents(stack, resolver.resolve_general(stack), resolver.resolve_agent(stack), store)

    first, second = run(), run()
    assert first == second
    assert first.general.encode("utf-8") == second.general.encode("utf-8")
