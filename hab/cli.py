"""Command-line entry point for the habit tracker."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version as _dist_version
from typing import Callable, Sequence, TextIO

from hab.actions import (
    CommandError,
    add_entry,
    delete_habit,
    list_habits,
    new_habit,
    prune_habits,
    show_stats,
)
from hab.grid import parse_timeline
from hab.store import HabitError, HabitManager
from hab.tui import run_tui

COMMANDS = ("add", "delete", "list", "new", "prune", "stats")

_DESCRIPTION = """\
hab is a fast, terminal-based habit tracker that visualizes your daily habits
using GitHub-style contribution grids. Track multiple habits with different
frequencies and view your progress over time."""

_EPILOG = """\
commands:
  add [habit] [date]   Add an entry for a habit
  delete [habit]       Delete a habit
  list                 List all habits with statistics
  new [habit-name]     Create a new habit
  prune [habit-key]    Remove excess entries that exceed the target per day
  stats [habit]        Show detailed statistics for a habit

examples:
  hab                    # Launch interactive TUI (default: 12 months)
  hab -i                 # Launch interactive TUI explicitly
  hab -t 3m              # Launch TUI with 3 month timeline
  hab --timeline 6m      # Launch TUI with 6 month timeline
  hab --no-legend        # Launch TUI without legend
  hab new exercise       # Create a new habit called 'exercise'
  hab exercise           # Add an entry for 'exercise' today
  hab list               # List all habits with statistics"""


def _version() -> str:
    try:
        return _dist_version("hab")
    except PackageNotFoundError:
        return "dev"


def _add_root_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--interactive", action="store_true", help="Launch interactive TUI mode"
    )
    parser.add_argument(
        "-t",
        "--timeline",
        default="12m",
        help="Timeline to display (3m, 6m, 12m)",
    )
    parser.add_argument(
        "--no-legend",
        dest="no_legend",
        action="store_true",
        help="Hide the completion legend",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s version {_version()}"
    )


def _new_root(prog: str = "hab") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_root_flags(parser)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for the root flags and every subcommand."""
    parser = _new_root()
    sub = parser.add_subparsers(dest="command", metavar="command")

    add = sub.add_parser(
        "add",
        help="Add an entry for a habit",
        description="Add an entry for a habit. If no date is specified, today's date is used.",
    )
    add.add_argument("habit")
    add.add_argument("date", nargs="?", default="")
    add.add_argument(
        "-d", "--date", dest="date_flag", default="",
        help="Date to add entry for (YYYY-MM-DD)",
    )

    delete = sub.add_parser(
        "delete",
        help="Delete a habit",
        description="Delete a habit permanently. This will remove all data for the habit.",
    )
    delete.add_argument("habit")
    delete.add_argument(
        "-f", "--force", action="store_true", help="Delete without confirmation"
    )

    sub.add_parser(
        "list",
        help="List all habits with statistics",
        description="List all habits with their current statistics.",
    )

    new = sub.add_parser(
        "new",
        help="Create a new habit",
        description="Create a new habit to track.",
    )
    new.add_argument("name", nargs="?", default=None)
    new.add_argument(
        "-c", "--color", default="",
        help="Color for the habit (red, blue, green, magenta, cyan, yellow)",
    )
    new.add_argument(
        "-t", "--target", type=int, default=0,
        help="Target number of times per day",
    )

    prune = sub.add_parser(
        "prune",
        help="Remove excess entries that exceed the target per day for habits",
        description="Remove excess entries that exceed the target per day for each habit.",
    )
    prune.add_argument("habit", nargs="?", default=None)
    prune.add_argument(
        "--force", action="store_true", help="Prune without confirmation prompts"
    )
    prune.add_argument(
        "--dry-run", dest="dry_run", action="store_true",
        help="Show what would be pruned without making changes",
    )

    stats = sub.add_parser(
        "stats",
        help="Show detailed statistics for a habit",
        description="Show detailed statistics for a specific habit.",
    )
    stats.add_argument("habit")
    return parser


def _root_only_parser() -> argparse.ArgumentParser:
    parser = _new_root()
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return parser


def _first_positional(argv: Sequence[str]) -> str | None:
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            return next(tokens, None)
        if token in ("-t", "--timeline"):
            next(tokens, None)
            continue
        if token.startswith("-") and token != "-":
            continue
        return token
    return None


def _with_manager(
    action: Callable[[HabitManager], object], errors: TextIO | None = None
) -> int:
    stream = sys.stdout if errors is None else errors
    manager = HabitManager()
    try:
        manager.load()
    except HabitError as exc:
        print(f"Error loading habits: {exc}", file=stream)
        return 1
    try:
        action(manager)
    except CommandError as exc:
        print(exc, file=stream)
        return 1
    return 0


def _cmd_add(ns: argparse.Namespace) -> int:
    date = ns.date_flag or ns.date or None
    return _with_manager(lambda m: add_entry(m, ns.habit, date))


def _cmd_delete(ns: argparse.Namespace) -> int:
    return _with_manager(lambda m: delete_habit(m, ns.habit, ns.force))


def _cmd_list(ns: argparse.Namespace) -> int:
    return _with_manager(list_habits)


def _cmd_new(ns: argparse.Namespace) -> int:
    return _with_manager(
        lambda m: new_habit(m, ns.name, ns.color or None, ns.target or None)
    )


def _cmd_prune(ns: argparse.Namespace) -> int:
    return _with_manager(
        lambda m: prune_habits(m, ns.habit, ns.dry_run, ns.force), sys.stderr
    )


def _cmd_stats(ns: argparse.Namespace) -> int:
    return _with_manager(lambda m: show_stats(m, ns.habit))


_HANDLERS: dict[str, Callable[[argparse.Namespace], int]] = {
    "add": _cmd_add,
    "delete": _cmd_delete,
    "list": _cmd_list,
    "new": _cmd_new,
    "prune": _cmd_prune,
    "stats": _cmd_stats,
}


def _run_root(ns: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if not ns.args or ns.interactive:
        try:
            timeline = parse_timeline(ns.timeline)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 1
        return _with_manager(lambda m: run_tui(m, timeline, not ns.no_legend))

    if len(ns.args) == 1:
        return _with_manager(lambda m: add_entry(m, ns.args[0]))

    parser.print_help(sys.stdout)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the hab command line; return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if _first_positional(args) in COMMANDS:
        ns = build_parser().parse_args(args)
        return _HANDLERS[ns.command](ns)
    parser = _root_only_parser()
    return _run_root(parser.parse_args(args), parser)


if __name__ == "__main__":
    sys.exit(main())