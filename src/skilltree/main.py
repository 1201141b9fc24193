"""CLI entrypoint for evaluating and editing skill tree configurations."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable
from pathlib import Path

from . import __version__
from .compiler import compile_tree, extract_skill_references
from .config_loader import DEFAULT_CONFIG_TEXT, dump_config, load_config
from .cycles import CycleError, build_dependency_graph, find_cycle
from .evaluator import requirement_progress
from .models import EvaluationResult
from .service import SkillTreeSession

PrintFn = Callable[[str], None]

EXIT_OK = 0
EXIT_CYCLE = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(prog="skilltree", description="Evaluate declarative skill trees")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    status = commands.add_parser("status", help="show which skills are satisfied")
    status.add_argument("config", type=Path)

    check = commands.add_parser("check", help="check skill dependencies for cycles")
    check.add_argument("config", type=Path)

    graph = commands.add_parser("graph", help="export graph elements as JSON")
    graph.add_argument("config", type=Path)
    graph.add_argument("-o", "--output", type=Path, default=None)

    invest = commands.add_parser("invest", help="set experience invested in a skill")
    invest.add_argument("config", type=Path)
    invest.add_argument("skill")
    invest.add_argument("points", type=int)

    init = commands.add_parser("init", help="write the sample configuration")
    init.add_argument("config", type=Path)
    init.add_argument("--force", action="store_true", help="overwrite an existing file")
    return parser


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init":
        return _init_command(args.config, args.force, print_fn)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print_fn(f"Configuration not found: {args.config}")
        return EXIT_USAGE
    except ValueError as exc:
        print_fn(str(exc))
        return EXIT_USAGE

    if args.command == "check":
        return _check_command(config, print_fn)

    try:
        session = SkillTreeSession(config)
    except CycleError as exc:
        print_fn(str(exc))
        return EXIT_CYCLE

    if args.command == "status":
        _status_command(session, print_fn)
        return EXIT_OK
    if args.command == "graph":
        return _graph_command(session, args.output, print_fn)
    return _invest_command(session, args.config, args.skill, args.points, print_fn)


def _init_command(path: Path, force: bool, print_fn: PrintFn) -> int:
    """Write the sample configuration file."""
    if path.exists() and not force:
        print_fn(f"{path} already exists. Use --force to overwrite.")
        return EXIT_USAGE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
    print_fn(f"Wrote sample skill tree to {path}.")
    return EXIT_OK


def _check_command(config: dict[str, object], print_fn: PrintFn) -> int:
    """Report whether the configured skills form a cycle."""
    cycle = find_cycle(build_dependency_graph(compile_tree(config)))
    if cycle is None:
        print_fn("No cycles.")
        return EXIT_OK
    print_fn(f"Cycle detected: {' -> '.join(cycle)}")
    return EXIT_CYCLE


def _status_command(session: SkillTreeSession, print_fn: PrintFn) -> None:
    """Print a satisfaction table for every skill."""
    result = session.evaluate()
    print_fn(f"\n=== {session.title} ===")
    if not result.skills:
        print_fn("No skills defined.")
        return

    rows = _status_rows(result)
    headers = ("Skill", "Title", "State", "Conditions", "Dependencies")
    widths = [max(len(headers[index]), max(len(row[index]) for row in rows)) for index in range(len(headers))]
    print_fn(" ".join(f"{header:<{width}}" for header, width in zip(headers, widths)).rstrip())
    print_fn(" ".join("-" * width for width in widths))
    for row in rows:
        print_fn(" ".join(f"{value:<{width}}" for value, width in zip(row, widths)).rstrip())
    print_fn("* = unsatisfied dependency")


def _status_rows(result: EvaluationResult) -> list[tuple[str, str, str, str, str]]:
    rows: list[tuple[str, str, str, str, str]] = []
    for skill_id, evaluated in result.skills.items():
        state = "satisfied" if evaluated.satisfied else "unsatisfied"
        done, total = requirement_progress(evaluated.result)
        dependencies = [dep for dep in dict.fromkeys(extract_skill_references(evaluated.result)) if dep in result.skills]
        if dependencies:
            items = [dep if result.is_satisfied(dep) else f"*{dep}" for dep in dependencies]
            dependency_text = ", ".join(items)
        else:
            dependency_text = "none"
        rows.append((skill_id, evaluated.title, state, f"{done}/{total}", dependency_text))
    return rows


def _graph_command(session: SkillTreeSession, output: Path | None, print_fn: PrintFn) -> int:
    """Print or write graph elements as JSON."""
    elements = session.graph().to_elements()
    payload = {"title": session.title, "layout": session.layout, "elements": elements}
    text = json.dumps(payload, indent=2)
    if output is None:
        print_fn(text)
        return EXIT_OK
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    print_fn(f"Wrote {len(elements)} elements to {output}.")
    return EXIT_OK


def _invest_command(session: SkillTreeSession, path: Path, skill_id: str, points: int, print_fn: PrintFn) -> int:
    """Set experience for one skill and save the configuration."""
    if skill_id not in session.tree:
        print_fn(f"Unknown skill: {skill_id}")
        return EXIT_USAGE
    try:
        session.set_experience(skill_id, points)
    except ValueError as exc:
        print_fn(str(exc))
        return EXIT_USAGE

    dump_config(session.to_config(), path)
    logger.debug("Saved configuration to %s", path)
    satisfied = session.evaluate().is_satisfied(skill_id)
    state = "satisfied" if satisfied else "unsatisfied"
    print_fn(f"Set {skill_id} experience to {points} ({state}).")
    return EXIT_OK


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
