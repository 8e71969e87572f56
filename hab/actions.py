"""The habit commands: adding, deleting, listing, creating, pruning and stats."""

from __future__ import annotations

import re
import sys
from collections import Counter
from datetime import date
from typing import TextIO

from hab.store import HabitError, HabitManager, format_date

VALID_COLORS = ("red", "blue", "green", "magenta", "cyan", "yellow")
DEFAULT_COLOR = "green"
DEFAULT_TARGET = 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class CommandError(Exception):
    """A command failed; the message is what the user should see."""


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _inp(inp: TextIO | None) -> TextIO:
    return sys.stdin if inp is None else inp


def _read_line(inp: TextIO) -> str | None:
    """Read one newline-terminated line; None when input ends first."""
    line = inp.readline()
    if not line.endswith("\n"):
        return None
    return line


def _title(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest as is."""

    def is_separator(ch: str) -> bool:
        if ch.isascii():
            return not (ch.isalnum() or ch == "_")
        if ch.isalpha() or ch.isdigit():
            return False
        return ch.isspace()

    result = []
    previous = " "
    for ch in text:
        result.append(ch.upper() if is_separator(previous) else ch)
        previous = ch
    return "".join(result)


def add_entry(
    manager: HabitManager,
    habit_key: str,
    date: str | None = None,
    out: TextIO | None = None,
    today: "date_type | None" = None,
) -> str:
    """Log a completion of a habit, today unless a date is given."""
    stream = _out(out)
    if manager.get_activity(habit_key) is None:
        raise CommandError(
            f"Error: habit '{habit_key}' does not exist\n"
            f"Create it first with: hab new {habit_key}"
        )

    today_str = format_date(today or date_type.today())
    entry_date = date or today_str

    try:
        manager.add_entry(habit_key, entry_date)
    except HabitError as exc:
        raise CommandError(f"Error adding entry: {exc}") from exc

    activity = manager.get_activity(habit_key)
    if entry_date == today_str:
        print(f"✓ Added entry for '{activity.name}' today", file=stream)
    else:
        print(f"✓ Added entry for '{activity.name}' on {entry_date}", file=stream)

    try:
        stats = manager.get_stats(habit_key, today)
    except HabitError:
        return entry_date
    if stats.current_streak > 0:
        print(f"Current streak: {stats.current_streak} days 🔥", file=stream)
    return entry_date


date_type = date


def delete_habit(
    manager: HabitManager,
    habit_key: str,
    force: bool = False,
    inp: TextIO | None = None,
    out: TextIO | None = None,
) -> bool:
    """Delete a habit, asking first unless forced; return whether it was deleted."""
    stream = _out(out)
    activity = manager.get_activity(habit_key)
    if activity is None:
        raise CommandError(f"Error: habit '{habit_key}' does not exist")

    if not force:
        stream.write(
            f"Are you sure you want to delete habit '{activity.name}'? "
            f"This will remove all {len(activity.dates)} entries. (y/N): "
        )
        stream.flush()
        line = _read_line(_inp(inp))
        if line is None:
            raise CommandError("Error reading input: EOF")
        if line.strip().lower() not in ("y", "yes"):
            print("Operation cancelled", file=stream)
            return False

    try:
        manager.delete_activity(habit_key)
    except HabitError as exc:
        raise CommandError(f"Error deleting habit: {exc}") from exc

    print(f"✓ Deleted habit '{activity.name}'", file=stream)
    return True


def list_habits(
    manager: HabitManager,
    out: TextIO | None = None,
    today: date | None = None,
) -> None:
    """Print every habit with its statistics, sorted by key."""
    stream = _out(out)
    activities = manager.activities()
    if not activities:
        print("No habits found. Create one with: hab new [habit-name]", file=stream)
        return

    print("Your Habits:", file=stream)
    print("============", file=stream)

    for number, key in enumerate(sorted(activities), 1):
        activity = activities[key]
        try:
            stats = manager.get_stats(key, today)
        except HabitError as exc:
            print(f"Error getting stats for {key}: {exc}", file=stream)
            continue

        print(f"\n[{number}] {activity.name} ({activity.color})", file=stream)
        print(f"    Key: {key}", file=stream)
        print(f"    Total entries: {stats.total_entries}", file=stream)
        print(f"    Unique days: {stats.unique_days}", file=stream)
        print(f"    Target per day: {stats.target_per_day}", file=stream)
        if stats.current_streak > 0:
            print(f"    Current streak: {stats.current_streak} days 🔥", file=stream)
        else:
            print("    Current streak: 0 days", file=stream)
        print(f"    Add entry: hab {key}", file=stream)

    print(f"\nTotal habits: {len(activities)}", file=stream)
    print(
        "\nUse 'hab' to view the interactive grid, or 'hab [habit]' to add an entry.",
        file=stream,
    )


def _prompt_for_color(inp: TextIO, out: TextIO) -> str:
    out.write(
        "Choose color (red, blue, green, magenta, cyan, yellow) [green]: "
    )
    out.flush()
    line = _read_line(inp)
    if line is None:
        return DEFAULT_COLOR
    return line.strip() or DEFAULT_COLOR


def _prompt_for_target(inp: TextIO, out: TextIO) -> int:
    out.write("Target per day [1]: ")
    out.flush()
    line = _read_line(inp)
    if line is None:
        return DEFAULT_TARGET
    text = line.strip()
    if not _INTEGER_RE.fullmatch(text):
        return DEFAULT_TARGET
    target = int(text)
    return target if target >= 1 else DEFAULT_TARGET


def new_habit(
    manager: HabitManager,
    name: str | None = None,
    color: str | None = None,
    target: int | None = None,
    inp: TextIO | None = None,
    out: TextIO | None = None,
) -> str:
    """Create a habit, prompting for whatever was not given; return its key."""
    stream = _out(out)
    reader = _inp(inp)

    if name is not None:
        habit_key = name
        habit_name = _title(name.replace("_", " "))
    else:
        stream.write("Enter habit name: ")
        stream.flush()
        line = _read_line(reader)
        if line is None:
            raise CommandError("Error reading input: EOF")
        habit_name = line.strip()
        habit_key = habit_name.replace(" ", "_").lower()

    if not habit_name:
        raise CommandError("Error: habit name cannot be empty")

    if not color:
        color = _prompt_for_color(reader, stream)
    if not target:
        target = _prompt_for_target(reader, stream)

    if color not in VALID_COLORS:
        raise CommandError(
            f"Error: invalid color '{color}'. Valid colors: {', '.join(VALID_COLORS)}"
        )

    try:
        manager.create_activity(habit_key, habit_name, color, target)
    except HabitError as exc:
        raise CommandError(f"Error creating habit: {exc}") from exc

    message = f"✓ Created habit '{habit_name}' with color {color}"
    if target > 1:
        message += f" (target: {target} times per day)"
    print(message, file=stream)
    print(f"Add an entry with: hab {habit_key}", file=stream)
    return habit_key


def prune_habit(
    manager: HabitManager,
    habit_key: str,
    dry_run: bool = False,
    force: bool = False,
    inp: TextIO | None = None,
    out: TextIO | None = None,
) -> int:
    """Drop entries beyond a habit's daily target; return how many (would) go."""
    stream = _out(out)
    activity = manager.get_activity(habit_key)
    if activity is None:
        raise CommandError(f"Habit '{habit_key}' not found.")

    counts = Counter(activity.dates)
    target = activity.target_per_day or 1
    excess = {day: count - target for day, count in sorted(counts.items()) if count > target}
    if not excess:
        return 0
    total_excess = sum(excess.values())

    print(f"\nHabit: {activity.name} (target: {target} per day)", file=stream)
    for day, extra in excess.items():
        print(
            f"  {day}: {counts[day]} entries → {target} entries (removing {extra})",
            file=stream,
        )

    if dry_run:
        return total_excess

    if not force:
        stream.write(
            f"\nThis will remove {total_excess} excess entries for "
            f"'{activity.name}'. Continue? (y/N): "
        )
        stream.flush()
        words = _inp(inp).readline().split()
        response = words[0] if words else ""
        if response not in ("y", "Y", "yes"):
            print("Cancelled.", file=stream)
            return 0

    pruned = 0
    for day, extra in excess.items():
        for _ in range(extra):
            try:
                manager.remove_entry(habit_key, day)
            except HabitError as exc:
                raise CommandError(f"failed to remove entry for {day}: {exc}") from exc
            pruned += 1
    return pruned


def prune_habits(
    manager: HabitManager,
    habit_key: str | None = None,
    dry_run: bool = False,
    force: bool = False,
    inp: TextIO | None = None,
    out: TextIO | None = None,
) -> int:
    """Prune one habit, or all of them; return the total pruned."""
    stream = _out(out)
    activities = manager.activities()
    if not activities:
        print("No habits found to prune.", file=stream)
        return 0

    if habit_key is not None:
        if habit_key not in activities:
            raise CommandError(f"Habit '{habit_key}' not found.")
        keys = [habit_key]
    else:
        keys = sorted(activities)

    total = 0
    for key in keys:
        try:
            total += prune_habit(manager, key, dry_run, force, inp, stream)
        except CommandError as exc:
            print(f"Error pruning habit '{key}': {exc}", file=sys.stderr)

    if dry_run:
        print(f"\nDry run complete. Would prune {total} total entries.", file=stream)
        print("Run without --dry-run to actually remove entries.", file=stream)
    elif total > 0:
        print(f"\nSuccessfully pruned {total} total entries.", file=stream)
    else:
        print("\nNo excess entries found to prune.", file=stream)
    return total


def show_stats(
    manager: HabitManager,
    habit_key: str,
    out: TextIO | None = None,
    today: date | None = None,
) -> None:
    """Print detailed statistics for one habit."""
    stream = _out(out)
    activity = manager.get_activity(habit_key)
    if activity is None:
        raise CommandError(f"Error: habit '{habit_key}' does not exist")

    try:
        stats = manager.get_stats(habit_key, today)
    except HabitError as exc:
        raise CommandError(f"Error getting statistics: {exc}") from exc

    print(f"Statistics for '{activity.name}'", file=stream)
    print("=" * (len(activity.name.encode("utf-8")) + 16), file=stream)
    print(f"Key: {habit_key}", file=stream)
    print(f"Color: {activity.color}", file=stream)
    print(f"Target per day: {stats.target_per_day}", file=stream)
    print(f"Total entries: {stats.total_entries}", file=stream)
    print(f"Unique days tracked: {stats.unique_days}", file=stream)
    if stats.current_streak > 0:
        print(f"Current streak: {stats.current_streak} days 🔥", file=stream)
    else:
        print("Current streak: 0 days", file=stream)

    if stats.target_per_day > 1:
        expected = stats.unique_days * stats.target_per_day
        if expected > 0:
            rate = stats.total_entries / expected * 100
            print(
                f"Completion rate: {rate:.1f}% "
                f"({stats.total_entries}/{expected} expected entries)",
                file=stream,
            )

    print(f"\nUse 'hab {habit_key}' to add an entry for today", file=stream)