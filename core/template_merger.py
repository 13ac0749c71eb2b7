"""Merging of structured templates (heading + text + bullets) into one document."""
from typing import Dict, List, Sequence, Tuple
from models.rules import MergedSection, Template


def trim_all(values: Sequence[str]) -> List[str]:
    """Trimmed, non-empty values."""
    return [v.strip() for v in values if v and v.strip()]


def merge_bullets(existing: Sequence[str], incoming: Sequence[str]) -> List[str]:
    """Union of two bullet lists, first-seen order, exact-match de-duplication after trimming."""
    seen = set()
    merged = []
    for bullet in list(existing) + list(incoming):
        bullet = bullet.strip()
        if not bullet or bullet in seen:
            continue
        seen.add(bullet)
        merged.append(bullet)
    return merged


def dedupe_templates(templates: Sequence[Template]) -> List[Template]:
    """Drop repeated selections of the same template, keeping the first."""
    seen = set()
    unique = []
    for template in templates:
        if template.name in seen:
            continue
        seen.add(template.name)
        unique.append(template)
    return unique


def merge_templates(templates: Sequence[Template]) -> Tuple[str, List[MergedSection]]:
    """
    Merge sections by heading, preserving first-seen heading order.

    For a heading seen again, differing non-empty text is appended after a
    blank line and bullets are unioned. Sections without a heading are
    dropped. The title is the first non-empty template title, or one built
    from the template names.

    Returns:
        (title, merged sections)
    """
    title = next((t.title.strip() for t in templates if t.title.strip()), "")
    if not title:
        title = "Copilot instructions (" + " + ".join(t.name for t in templates) + ")"

    merged: List[MergedSection] = []
    index: Dict[str, int] = {}
    for template in templates:
        for section in template.sections:
            heading = section.heading.strip()
            if not heading:
                continue

            if heading not in index:
                index[heading] = len(merged)
                merged.append(
                    MergedSection(
                        heading=heading,
                        text=section.text.strip(),
                        bullets=trim_all(section.bullets),
                    )
                )
                continue

            target = merged[index[heading]]
            text = section.text.strip()
            if text:
                if not target.text:
                    target.text = text
                elif target.text != text:
                    target.text = f"{target.text}\n\n{text}"
            target.bullets = merge_bullets(target.bullets, section.bullets)

    return title, merged


def render_markdown(title: str, sections: Sequence[MergedSection], sets: Sequence[str]) -> str:
    """Render merged sections. The generated comment only depends on the set names."""
    lines = [f"# {title.strip()}", ""]
    lines.append(f"<!-- generated by ai-instructions: sets: {', '.join(sets)} -->")
    lines.append("")

    for section in sections:
        lines.append(f"## {section.heading}")
        lines.append("")
        if section.text:
            lines.append(section.text)
            lines.append("")
        for bullet in section.bullets:
            lines.append(f"- {bullet}")
        if section.bullets:
            lines.append("")

    return "\n".join(lines)
