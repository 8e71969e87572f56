"""Contribution-grid layout and cell rendering rules."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, timedelta
from enum import IntEnum
from typing import Mapping

from hab.store import Activity, format_date

MAX_WEEKS = 60


class RenderingLevel(IntEnum):
    """What the terminal can draw."""

    ASCII = 0
    ASCII_EXTENDED = 1
    UNICODE = 2


@dataclass(frozen=True)
class CharacterSet:
    """Glyphs for each completion level."""

    none: str
    low: str
    partial: str
    complete: str


_CHARACTER_SETS = {
    RenderingLevel.ASCII: CharacterSet(".", "-", "+", "#"),
    RenderingLevel.ASCII_EXTENDED: CharacterSet("░", "▒", "▓", "█"),
    RenderingLevel.UNICODE: CharacterSet("○", "◐", "◑", "●"),
}

_MODERN_TERMS = (
    "xterm-256color",
    "screen-256color",
    "tmux-256color",
    "alacritty",
    "kitty",
    "iterm",
    "gnome-terminal",
)
_EXTENDED_TERMS = ("xterm", "screen", "tmux", "ansi", "vt100", "vt102", "vt220")

_COLOR_CODES = {
    "red": "1",
    "green": "2",
    "yellow": "3",
    "blue": "4",
    "magenta": "5",
    "cyan": "6",
    "gray": "8",
}


class Timeline(IntEnum):
    """How many days the grid covers, today included."""

    THREE_MONTHS = 90
    SIX_MONTHS = 180
    TWELVE_MONTHS = 365


_TIMELINE_ALIASES = {
    "3m": Timeline.THREE_MONTHS,
    "3": Timeline.THREE_MONTHS,
    "6m": Timeline.SIX_MONTHS,
    "6": Timeline.SIX_MONTHS,
    "12m": Timeline.TWELVE_MONTHS,
    "1y": Timeline.TWELVE_MONTHS,
    "y": Timeline.TWELVE_MONTHS,
    "12": Timeline.TWELVE_MONTHS,
    "": Timeline.TWELVE_MONTHS,
}

_TIMELINE_LABELS = {
    Timeline.THREE_MONTHS: "3 months",
    Timeline.SIX_MONTHS: "6 months",
    Timeline.TWELVE_MONTHS: "12 months",
}


@dataclass(frozen=True)
class GridCell:
    """One day of the grid."""

    date: date
    level: int = 0
    color: str = "gray"
    active: bool = False


def character_set(level: RenderingLevel) -> CharacterSet:
    """Return the glyphs used at a rendering level."""
    return _CHARACTER_SETS[RenderingLevel(level)]


def detect_rendering_level(environ: Mapping[str, str] | None = None) -> RenderingLevel:
    """Guess the terminal's drawing ability from the environment."""
    env = os.environ if environ is None else environ

    override = env.get("HAB_RENDERING", "").lower()
    if override == "ascii":
        return RenderingLevel.ASCII
    if override in ("extended", "ascii-extended"):
        return RenderingLevel.ASCII_EXTENDED
    if override == "unicode":
        return RenderingLevel.UNICODE

    term = env.get("TERM", "").lower()
    is_utf8 = "UTF-8" in env.get("LANG", "") or "UTF-8" in env.get("LC_ALL", "")

    if is_utf8 and any(name in term for name in _MODERN_TERMS):
        return RenderingLevel.UNICODE
    if any(name in term for name in _EXTENDED_TERMS):
        return RenderingLevel.ASCII_EXTENDED
    return RenderingLevel.ASCII


def parse_timeline(value: str) -> Timeline:
    """Turn a timeline option such as '3m' or '1y' into a Timeline."""
    try:
        return _TIMELINE_ALIASES[value]
    except KeyError:
        raise ValueError(f"Invalid timeline '{value}'. Use 3m, 6m, or 12m") from None


def timeline_label(timeline: Timeline) -> str:
    """Human-readable name of a timeline."""
    return _TIMELINE_LABELS.get(timeline, "")


def generate_grid(
    activities: Mapping[str, Activity],
    timeline: Timeline,
    today: date | None = None,
) -> list[list[GridCell]]:
    """Lay out Sunday-first weeks covering the timeline up to today."""
    end = today or date.today()
    start = end - timedelta(days=int(timeline) - 1)
    logged = {key: set(activity.dates) for key, activity in activities.items()}

    current = start - timedelta(days=start.isoweekday() % 7)
    weeks: list[list[GridCell]] = []
    while current <= end:
        week = []
        for _ in range(7):
            cell = GridCell(date=current)
            if start <= current <= end:
                day = format_date(current)
                for key, activity in activities.items():
                    if day in logged[key]:
                        cell = GridCell(current, 1, activity.color, True)
                        break
            week.append(cell)
            current += timedelta(days=1)
        weeks.append(week)
        if len(weeks) > MAX_WEEKS:
            break
    return weeks


def cell_char(cell_date: date, activity: Activity, level: RenderingLevel) -> str:
    """Glyph for how far the day's target was met."""
    day = format_date(cell_date)
    completions = activity.dates.count(day)
    target = activity.target_per_day or 1
    rate = completions / target
    glyphs = character_set(level)
    if rate == 0:
        return glyphs.none
    if rate < 0.5:
        return glyphs.low
    if rate < 1.0:
        return glyphs.partial
    return glyphs.complete


def cell_color(cell_date: date, activity: Activity) -> str:
    """Terminal colour code for a day: the habit's colour if logged, else dim."""
    if format_date(cell_date) in activity.dates:
        return color_code(activity.color)
    return "8"


def color_code(color_name: str) -> str:
    """Map a colour name to a terminal colour code, white when unknown."""
    return _COLOR_CODES.get(color_name, "7")