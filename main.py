import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from core.config_loader import ProjectConfig, load_project_config
from core.errors import AiInstructionsError, NoSelectionError, RuleStoreError
from core.merger import Documents, build_documents
from core.reader_registry import MarkerReaderRegistry
from core.registry_validator import format_registry_report, validate_registry
from core.rule_resolver import RuleResolver
from core.stack_detector import StackDetector
from core.template_merger import dedupe_templates, merge_templates, render_markdown
from core.validation import FileStatus, compare_file_status
from models.detection import StackRecord
from models.rules import ResolvedRuleSet
from models.technology import Technology
from rules.rule_store import RuleStore
from rules.rules_loader import list_template_names, load_technologies, load_template

logger = logging.getLogger(__name__)


def _split_selectors(values: Optional[List[str]]) -> List[str]:
    """Accept both repeated --rule flags and comma separated lists."""
    selectors = []
    for value in values or []:
        selectors.extend(s.strip() for s in value.split(",") if s.strip())
    return selectors


def _resolve_path(root: str, path: str) -> str:
    return path if path == "-" else os.path.join(root, path)


def _write_file_with_dirs(path: str, content: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content if content.endswith("\n") else content + "\n")


def _select(
    root: str,
    selectors: List[str],
    config: ProjectConfig,
    store: RuleStore,
    technologies: List[Technology],
) -> Tuple[Optional[StackRecord], ResolvedRuleSet, ResolvedRuleSet]:
    """Manual mode when selectors are given, otherwise detect the stack."""
    resolver = RuleResolver(store, technologies)
    if selectors:
        logger.info(f"Manual mode: {', '.join(selectors)}")
        return (
            None,
            resolver.resolve_general_from_selectors(selectors),
            resolver.resolve_agent_from_selectors(selectors),
        )

    detector = StackDetector(technologies, exclude_dirs=config.exclude_dirs)
    stack = detector.detect(root)
    return stack, resolver.resolve_general(stack), resolver.resolve_agent(stack)


def cmd_detect(args, store: RuleStore, technologies: List[Technology]) -> int:
    config = load_project_config(args.root)
    stack = StackDetector(technologies, exclude_dirs=config.exclude_dirs).detect(args.root)
    print("Detected stack:")
    for entry in stack.detected():
        print(f"- {entry.label}: {entry.version}")
    return 0


def cmd_generate(args, store: RuleStore, technologies: List[Technology]) -> int:
    config = load_project_config(args.root)
    selectors = _split_selectors(args.rule) or config.rules
    stack, general, agents = _select(args.root, selectors, config, store, technologies)

    if not general and not agents:
        print(NoSelectionError())
        return 0

    docs = build_documents(stack, general, agents, store)
    out = args.out or config.output
    if out == "-":
        if docs.general:
            print("=== copilot-instructions.md ===")
            print(docs.general)
        if docs.agents:
            print("\n=== AGENTS.md ===")
            print(docs.agents)
        return 0

    if docs.general:
        general_path = _resolve_path(args.root, out)
        _write_file_with_dirs(general_path, docs.general)
        print(f"Generated instructions\nCOPILOT documentation written to {general_path}")

    if docs.agents:
        agents_path = _resolve_path(args.root, args.agents_out or config.agents_output)
        _write_file_with_dirs(agents_path, docs.agents)
        print(f"AGENTS documentation written to {agents_path}")
    return 0


def cmd_validate(args, store: RuleStore, technologies: List[Technology]) -> int:
    # 1) Bundled content and registry sanity
    if not store.list_ids():
        raise RuleStoreError(store.root, "rule store is empty")
    problems = validate_registry(technologies, MarkerReaderRegistry.get_all_filenames())
    if problems:
        for problem in problems:
            print(f"Registry problem: {problem}", file=sys.stderr)
        return 1

    # 2) Recompute expected documents exactly like generate does
    config = load_project_config(args.root)
    selectors = _split_selectors(args.rule) or config.rules
    stack, general, agents = _select(args.root, selectors, config, store, technologies)
    if not general:
        raise NoSelectionError("No general rules resolved – nothing to validate against.")
    docs: Documents = build_documents(stack, general, agents, store)

    expected = [(_resolve_path(args.root, args.out or config.output), docs.general)]
    if docs.agents:
        expected.append((_resolve_path(args.root, args.agents_out or config.agents_output), docs.agents))

    # 3) Report detailed status
    had_error = False
    for path, content in expected:
        status = compare_file_status(path, content)
        print(f"{status}: '{path}'")
        if status is not FileStatus.UP_TO_DATE:
            had_error = True

    if had_error:
        print("Validation failed. Re-run 'generate' to update the files.", file=sys.stderr)
        return 1

    print("Validation passed: tech stack detected and files are up to date.")
    return 0


def cmd_list(args, store: RuleStore, technologies: List[Technology]) -> int:
    if args.check:
        print(format_registry_report(technologies, MarkerReaderRegistry.get_all_filenames()))
        return 0

    ids = store.list_ids()
    if not ids:
        print("No rules found.")
        return 0
    for rule_id in ids:
        print(rule_id)
    return 0


def cmd_compose(args, store: RuleStore, technologies: List[Technology]) -> int:
    available = list_template_names()
    unknown = [s for s in args.sets if s not in available]
    if unknown:
        print(f"Unknown set(s): {', '.join(unknown)}", file=sys.stderr)
        print(f"Available sets: {', '.join(available)}", file=sys.stderr)
        return 2

    try:
        templates = dedupe_templates([load_template(name) for name in args.sets])
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sets = [t.name for t in templates]
    title, sections = merge_templates(templates)
    markdown = render_markdown(title, sections, sets)
    out = _resolve_path(args.root, args.out or load_project_config(args.root).output)

    if args.validate:
        status = compare_file_status(out, markdown)
        if status is not FileStatus.UP_TO_DATE:
            print(f"{status}: '{out}'. Re-run without --validate to regenerate.", file=sys.stderr)
            return 1
        print("OK: file is up to date.")
        return 0

    if out == "-":
        print(markdown)
        return 0
    _write_file_with_dirs(out, markdown)
    print(f"Wrote {out} (sets: {', '.join(sets)})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-instructions",
        description="AI instructions CLI for stack detection and instruction file generation",
    )
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect project stack from composer.json and package.json")
    detect.add_argument("--root", default=".", help="Project root to scan (default: current directory)")
    detect.set_defaults(func=cmd_detect)

    for name, func, help_text in (
        ("generate", cmd_generate, "Generate copilot-instructions.md and AGENTS.md from the detected stack or explicit rules"),
        ("validate", cmd_validate, "Validate tech stack and ensure generated files are up to date"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--root", default=".", help="Project root to scan (default: current directory)")
        sub.add_argument("--rule", action="append", help="Rule set(s) to include, e.g. 'php', 'php/8', 'laravel/11' (repeatable or comma separated)")
        sub.add_argument("-o", "--out", help="Output path for copilot-instructions.md (default .github/copilot-instructions.md, '-' for stdout)")
        sub.add_argument("--agents-out", help="Output path for the agents document (default AGENTS.md)")
        sub.set_defaults(func=func)

    list_cmd = subparsers.add_parser("list", help="List all available rule files")
    list_cmd.add_argument("--check", action="store_true", help="Show the technology registry and check it for problems")
    list_cmd.set_defaults(func=cmd_list)

    compose = subparsers.add_parser("compose", help="Compose copilot-instructions.md from structured templates")
    compose.add_argument("sets", nargs="+", help=f"Template sets to merge (available: {', '.join(list_template_names())})")
    compose.add_argument("--root", default=".", help="Project root for the output file (default: current directory)")
    compose.add_argument("-o", "--out", help="Output path (default .github/copilot-instructions.md, '-' for stdout)")
    compose.add_argument("--validate", action="store_true", help="Verify the file is up to date instead of writing it")
    compose.set_defaults(func=cmd_compose)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    try:
        store = RuleStore()
        technologies = load_technologies()
        logger.debug(f"Loaded {len(technologies)} technologies, running '{args.command}'")
        return args.func(args, store, technologies)
    except AiInstructionsError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
