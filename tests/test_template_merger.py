import pytest
from core.template_merger import (
    dedupe_templates,
    merge_bullets,
    merge_templates,
    render_markdown,
)
from models.rules import MergedSection, Template
from rules.rules_loader import list_template_names, load_template


def _template(name, sections, title=""):
    return Template(name=name, title=title, sections=[MergedSection(*s) for s in sections])


def test_merge_bullets_is_stable_and_exact():
    merged = merge_bullets(["Use types.", " Test it. "], ["Test it.", "use types.", "", "New."])
    assert merged == ["Use types.", "Test it.", "use types.", "New."]


def test_sections_merge_by_heading_in_first_seen_order():
    php = _template("php", [
        ("General", "Write typed PHP.", ["Follow PSR-12."]),
        ("Testing", "", ["Write tests."]),
    ])
    laravel = _template("laravel", [
        ("Database", "", ["Use migrations."]),
        (" General ", "Follow Laravel conventions.", ["Follow PSR-12.", "Keep controllers thin."]),
        ("Testing", "", ["Write tests."]),
    ])

    title, sections = merge_templates([php, laravel])

    assert title == "Copilot instructions (php + laravel)"
    assert [s.heading for s in sections] == ["General", "Testing", "Database"]
    general = sections[0]
    assert general.text == "Write typed PHP.\n\nFollow Laravel conventions."
    assert general.bullets == ["Follow PSR-12.", "Keep controllers thin."]
    assert sections[1].bullets == ["Write tests."]


def test_identical_text_is_not_repeated_and_empty_headings_dropped():
    a = _template("a", [("Rules", "Same text.", []), ("", "orphan", ["x"])], title="A rules")
    b = _template("b", [("Rules", " Same text. ", ["y"])])

    title, sections = merge_templates([a, b])

    assert title == "A rules"
    assert len(sections) == 1
    assert sections[0].text == "Same text."
    assert sections[0].bullets == ["y"]


def test_merge_does_not_mutate_templates():
    a = _template("a", [("Rules", "one", ["x"])])
    b = _template("b", [("Rules", "two", ["y"])])
    merge_templates([a, b])
    assert a.sections[0].text == "one"
    assert a.sections[0].bullets == ["x"]


def test_dedupe_templates_keeps_first():
    a1, b, a2 = _template("a", []), _template("b", []), _template("a", [("X", "", [])])
    assert dedupe_templates([a1, b, a2]) == [a1, b]


def test_render_markdown():
    sections = [MergedSection("General", "Intro.", ["One.", "Two."]), MergedSection("Empty", "", [])]
    markdown = render_markdown(" Title ", sections, ["php", "react"])
    assert markdown == (
        "# Title\n\n"
        "<!-- generated by ai-instructions: sets: php, react -->\n\n"
        "## General\n\nIntro.\n\n- One.\n- Two.\n\n"
        "## Empty\n"
    )


def test_bundled_templates_load_and_render_deterministically():
    names = list_template_names()
    assert {"php", "laravel", "react", "go"} <= set(names)

    templates = [load_template("php"), load_template("laravel")]
    first = render_markdown(*merge_templates(templates), ["php", "laravel"])
    second = render_markdown(*merge_templates([load_template("php"), load_template("laravel")]), ["php", "laravel"])

    assert first == second
    assert first.count("- Follow PSR-12 formatting.") == 1


def test_load_template_rejects_bad_documents(tmp_path):
    (tmp_path / "bad.yaml").write_text("- just a list\n")
    with pytest.raises(ValueError):
        load_template("bad", str(tmp_path))
    with pytest.raises(FileNotFoundError):
        load_template("nope", str(tmp_path))


def test_yml_templates_are_listed_and_loadable(tmp_path):
    (tmp_path / "short.yml").write_text("title: Short\nsections:\n  - heading: Notes\n    bullets: [one]\n")
    assert list_template_names(str(tmp_path)) == ["short"]
    template = load_template("short", str(tmp_path))
    assert template.title == "Short"
    assert template.sections[0].heading == "Notes"
