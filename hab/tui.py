"""Interactive terminal view of habit contribution grids."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from blessed import Terminal

from hab.grid import (
    RenderingLevel,
    Timeline,
    cell_char,
    cell_color,
    character_set,
    color_code,
    detect_rendering_level,
    generate_grid,
    timeline_label,
)
from hab.store import Activity, HabitError, HabitManager, format_date

DAY_LABELS = ("S", "M", "T", "W", "T", "F", "S")

Painter = Callable[..., str]


class ViewMode(Enum):
    """Which screen is showing."""

    ALL_ACTIVITIES = 0
    SINGLE_ACTIVITY = 1
    HABIT_SELECTION = 2


@dataclass(frozen=True)
class HabitItem:
    """An entry in the habit selection list."""

    key: str
    activity: Activity

    def filter_value(self) -> str:
        return self.activity.name

    def title(self) -> str:
        return self.activity.name

    def description(self) -> str:
        activity = self.activity
        return (
            f"Key: {self.key} • Color: {activity.color} • "
            f"Target: {max(1, activity.target_per_day)}/day • "
            f"Entries: {len(activity.dates)}"
        )


@dataclass(frozen=True)
class _Binding:
    keys: tuple[str, ...]
    help_key: str
    desc: str

    def matches(self, key: str) -> bool:
        return key in self.keys


UP = _Binding(("up", "k"), "↑/k", "move up")
DOWN = _Binding(("down", "j"), "↓/j", "move down")
ENTER = _Binding(("enter",), "enter", "select/log activity")
SPACE = _Binding((" ",), "space", "log activity")
TAB = _Binding(("tab",), "tab", "switch view")
QUIT = _Binding(("q", "ctrl+c"), "q", "quit")
ESCAPE = _Binding(("esc",), "esc", "back")
ALL_VIEW = _Binding(("a",), "a", "all activities")
TIMELINE_3M = _Binding(("ctrl+3",), "ctrl+3", "3 months")
TIMELINE_6M = _Binding(("ctrl+6",), "ctrl+6", "6 months")
TIMELINE_12M = _Binding(("ctrl+y",), "ctrl+y", "12 months")
TOGGLE_LEGEND = _Binding(("l",), "l", "toggle legend")
HELP = _Binding(("?",), "?", "toggle help")

_FULL_HELP = (
    (UP, DOWN, ENTER, SPACE),
    (TAB, ALL_VIEW, TOGGLE_LEGEND),
    (TIMELINE_3M, TIMELINE_6M, TIMELINE_12M),
    (HELP, QUIT, ESCAPE),
)

_TIMELINE_KEYS = (
    (TIMELINE_3M, Timeline.THREE_MONTHS),
    (TIMELINE_6M, Timeline.SIX_MONTHS),
    (TIMELINE_12M, Timeline.TWELVE_MONTHS),
)


class TrackerModel:
    """State and key handling of the interactive tracker."""

    def __init__(
        self,
        manager: HabitManager,
        timeline: Timeline = Timeline.TWELVE_MONTHS,
        show_legend: bool = True,
        rendering_level: RenderingLevel | None = None,
        today: date | None = None,
    ) -> None:
        self.manager = manager
        self.today = today
        self.timeline = Timeline(timeline)
        self.show_legend = show_legend
        self.rendering_level = (
            detect_rendering_level()
            if rendering_level is None
            else RenderingLevel(rendering_level)
        )
        self.activities = manager.activities()
        self.activity_keys = sorted(self.activities)
        self.grid = generate_grid(self.activities, self.timeline, self._day())
        self.view_mode = ViewMode.ALL_ACTIVITIES
        self.selected_index = 0
        self.show_help = False
        self.width = 0
        self.height = 0
        self.list_cursor = 0
        self.filter_text = ""
        self.filtering = False
        self.paint: Painter | None = None

    def _paint(self, text: str, color: str, bold: bool = False) -> str:
        """Style text with the attached painter, or leave it plain without one."""
        if self.paint is None:
            return text
        return self.paint(text, color, bold)

    def _day(self) -> date:
        return self.today or date.today()

    def _regenerate(self) -> None:
        self.grid = generate_grid(self.activities, self.timeline, self._day())

    def visible_items(self) -> list[HabitItem]:
        """Habit list entries that pass the current filter."""
        needle = self.filter_text.lower()
        items = (HabitItem(key, self.activities[key]) for key in self.activity_keys)
        return [item for item in items if needle in item.filter_value().lower()]

    def selected_item(self) -> HabitItem | None:
        items = self.visible_items()
        if not items:
            return None
        return items[min(self.list_cursor, len(items) - 1)]

    def handle_key(self, key: str) -> bool:
        """Apply one key press; return False when the program should exit."""
        if HELP.matches(key):
            self.show_help = not self.show_help
            return True
        if QUIT.matches(key):
            return False

        if self.view_mode is ViewMode.HABIT_SELECTION:
            self._update_list(key)
            if ENTER.matches(key):
                item = self.selected_item()
                if item is not None:
                    self.selected_index = self.activity_keys.index(item.key)
                    self.view_mode = ViewMode.SINGLE_ACTIVITY
            if ESCAPE.matches(key):
                self.view_mode = ViewMode.ALL_ACTIVITIES

        elif self.view_mode is ViewMode.ALL_ACTIVITIES:
            if TAB.matches(key):
                self.view_mode = ViewMode.HABIT_SELECTION
            if len(key) == 1 and "1" <= key <= "9":
                number = int(key) - 1
                if number < len(self.activity_keys):
                    self.selected_index = number
                    self.view_mode = ViewMode.SINGLE_ACTIVITY

        else:
            count = len(self.activity_keys)
            if UP.matches(key) and count:
                self.selected_index = (self.selected_index - 1) % count
            if DOWN.matches(key) and count:
                self.selected_index = (self.selected_index + 1) % count
            if TAB.matches(key):
                self.view_mode = ViewMode.HABIT_SELECTION
            if ALL_VIEW.matches(key):
                self.view_mode = ViewMode.ALL_ACTIVITIES
            if (ENTER.matches(key) or SPACE.matches(key)) and count:
                self._log_selected()

        for binding, timeline in _TIMELINE_KEYS:
            if binding.matches(key):
                self.timeline = timeline
                self._regenerate()
        if TOGGLE_LEGEND.matches(key):
            self.show_legend = not self.show_legend
        return True

    def _log_selected(self) -> None:
        selected = self.activity_keys[self.selected_index]
        try:
            self.manager.add_entry(selected, format_date(self._day()))
        except HabitError:
            return
        self.activities = self.manager.activities()
        self._regenerate()

    def _update_list(self, key: str) -> None:
        count = len(self.visible_items())
        if self.filtering:
            if key == "enter":
                self.filtering = False
            elif key == "esc":
                self.filtering = False
                self.filter_text = ""
            elif key == "backspace":
                self.filter_text = self.filter_text[:-1]
                self.list_cursor = 0
            elif key in ("up", "down"):
                self._move_cursor(-1 if key == "up" else 1, count)
            elif len(key) == 1 and key.isprintable():
                self.filter_text += key
                self.list_cursor = 0
            return

        if UP.matches(key):
            self._move_cursor(-1, count)
        elif DOWN.matches(key):
            self._move_cursor(1, count)
        elif key in ("home", "g"):
            self.list_cursor = 0
        elif key in ("end", "G"):
            self.list_cursor = max(0, count - 1)
        elif key == "/":
            self.filtering = True
            self.filter_text = ""
            self.list_cursor = 0
        elif key == "esc" and self.filter_text:
            self.filter_text = ""
            self.list_cursor = 0

    def _move_cursor(self, step: int, count: int) -> None:
        if count:
            self.list_cursor = max(0, min(count - 1, self.list_cursor + step))

    def resize(self, width: int, height: int) -> None:
        """Record the terminal size."""
        self.width = width
        self.height = height

    def render_activity_grid(self, activity: Activity, number: int | None = None) -> str:
        """Title line plus seven weekday rows of cells for one habit."""
        total = len(activity.dates)
        if number is not None and number > 0:
            title = f"[{number}] {activity.name} ({total} activities)"
        else:
            title = f"{activity.name} ({total} activities)"
        lines = [self._paint(title, color_code(activity.color), True)]
        for row, label in enumerate(DAY_LABELS):
            parts = [f"{label:<3}"]
            for week in self.grid:
                if row < len(week):
                    day = week[row].date
                    glyph = cell_char(day, activity, self.rendering_level)
                    parts.append(self._paint(glyph, cell_color(day, activity)) + "  ")
            lines.append("".join(parts))
        return "\n".join(lines) + "\n"

    def _short_help(self, bindings: tuple[_Binding, ...]) -> str:
        return " • ".join(
            f"{self._paint(b.help_key, '8')} {self._paint(b.desc, '7')}" for b in bindings
        )

    def _full_help(self) -> str:
        columns = [[f"{b.help_key} {b.desc}" for b in group] for group in _FULL_HELP]
        widths = [max(len(text) for text in column) for column in columns]
        rows = max(len(column) for column in columns)
        lines = []
        for row in range(rows):
            cells = [
                (column[row] if row < len(column) else "").ljust(width)
                for column, width in zip(columns, widths)
            ]
            lines.append("    ".join(cells).rstrip())
        return "\n".join(lines)

    def _list_view(self) -> str:
        lines = ["  " + self._paint("Select a Habit", "6", True), ""]
        if self.filtering or self.filter_text:
            cursor = "_" if self.filtering else ""
            lines += [f"  Filter: {self.filter_text}{cursor}", ""]
        items = self.visible_items()
        if not items:
            lines.append("  No items.")
            return "\n".join(lines)
        available = self.height - 4 - len(lines) if self.height else len(items) * 3
        per_page = max(1, available // 3)
        cursor = min(self.list_cursor, len(items) - 1)
        start = (cursor // per_page) * per_page
        for index, item in enumerate(items[start : start + per_page], start):
            if index == cursor:
                lines.append("│ " + self._paint(item.title(), "5", True))
                lines.append("│ " + self._paint(item.description(), "5"))
            else:
                lines.append("  " + item.title())
                lines.append("  " + self._paint(item.description(), "8"))
            lines.append("")
        return "\n".join(lines)

    def view(self) -> str:
        """Render the current screen as text."""
        if self.view_mode is ViewMode.HABIT_SELECTION:
            footer = (
                self._full_help()
                if self.show_help
                else self._short_help((ENTER, ESCAPE, HELP, QUIT))
            )
            return self._list_view() + "\n" + footer

        label = timeline_label(self.timeline)
        if self.view_mode is ViewMode.ALL_ACTIVITIES:
            title = f"Activity Tracker - All Activities ({label})"
        elif self.activity_keys:
            selected = self.activities[self.activity_keys[self.selected_index]]
            title = f"Activity Tracker - {selected.name} ({label})"
        else:
            title = f"Activity Tracker ({label})"

        parts = ["\n" + self._paint(title, "6", True) + "\n"]
        if os.environ.get("HAB_DEBUG") == "true":
            mode = {
                RenderingLevel.ASCII: "ASCII",
                RenderingLevel.ASCII_EXTENDED: "ASCII-Extended",
                RenderingLevel.UNICODE: "Unicode",
            }[self.rendering_level]
            parts.append("\n" + self._paint(f"Rendering Mode: {mode}", "8"))
        parts.append("\n\n")

        if self.view_mode is ViewMode.ALL_ACTIVITIES:
            grids = [
                self.render_activity_grid(self.activities[key], number)
                for number, key in enumerate(self.activity_keys, 1)
            ]
            parts.append("\n\n".join(grids))
        elif self.activity_keys:
            key = self.activity_keys[self.selected_index]
            parts.append(self.render_activity_grid(self.activities[key]))

        if self.show_legend:
            glyphs = character_set(self.rendering_level)
            legend = (
                f"None  {glyphs.none}  {glyphs.low}  {glyphs.partial}  "
                f"{glyphs.complete}  Complete"
            )
            grid_width = 3 + len(self.grid) * 3 - 2
            parts.append("\n\n")
            if grid_width > len(legend):
                parts.append(" " * (grid_width - len(legend)))
            parts.append(self._paint(legend, "8"))

        parts.append("\n\n")
        if self.show_help:
            parts.append(self._full_help())
        elif self.view_mode is ViewMode.ALL_ACTIVITIES:
            parts.append(self._short_help((TAB, TIMELINE_3M, TOGGLE_LEGEND, HELP, QUIT)))
        else:
            parts.append(self._short_help((UP, ENTER, ALL_VIEW, TAB, HELP, QUIT)))
        return "".join(parts)


_SEQUENCE_NAMES = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_TAB": "tab",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "backspace",
    "KEY_HOME": "home",
    "KEY_END": "end",
}

_CONTROL_NAMES = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x03": "ctrl+c",
    "\x19": "ctrl+y",
    "\x1e": "ctrl+6",
    "\x7f": "backspace",
    "\x08": "backspace",
}


def _key_name(keystroke) -> str | None:
    if keystroke.is_sequence and keystroke.name in _SEQUENCE_NAMES:
        return _SEQUENCE_NAMES[keystroke.name]
    text = str(keystroke)
    if text in _CONTROL_NAMES:
        return _CONTROL_NAMES[text]
    if len(text) == 1 and text.isprintable():
        return text
    return None


def _terminal_painter(term: Terminal) -> Painter:
    def paint(text: str, color: str, bold: bool = False) -> str:
        prefix = (str(term.bold) if bold else "") + str(term.color(int(color)))
        return f"{prefix}{text}{term.normal}"

    return paint


def run_tui(
    manager: HabitManager | None = None,
    timeline: Timeline = Timeline.TWELVE_MONTHS,
    show_legend: bool = True,
) -> None:
    """Run the interactive tracker until the user quits."""
    if manager is None:
        manager = HabitManager()
        manager.load()
    term = Terminal()
    model = TrackerModel(manager, timeline, show_legend)
    model.paint = _terminal_painter(term)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        size: tuple[int, int] | None = None
        dirty = True
        while True:
            current = (term.width, term.height)
            if current != size:
                size = current
                model.resize(*current)
                dirty = True
            if dirty:
                sys.stdout.write(term.home + term.clear + model.view())
                sys.stdout.flush()
                dirty = False
            try:
                keystroke = term.inkey(timeout=0.25)
            except KeyboardInterrupt:
                break
            if not keystroke:
                continue
            name = _key_name(keystroke)
            if name is None:
                continue
            if not model.handle_key(name):
                break
            dirty = True