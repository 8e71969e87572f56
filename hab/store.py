"""Habit records and their JSON-backed storage."""

from __future__ import annotations

import json
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Iterable, Mapping

DATA_FILE_ENV = "HAB_DATA_FILE"
FALLBACK_DATA_PATH = "data/activities.json"

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class HabitError(Exception):
    """Raised when a habit operation or the data file fails."""


def format_date(day: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date(text: str) -> date:
    """Parse a strict YYYY-MM-DD date; raise ValueError otherwise."""
    if not isinstance(text, str) or not _DATE_RE.fullmatch(text):
        raise ValueError(f"not a YYYY-MM-DD date: {text!r}")
    return date(int(text[0:4]), int(text[5:7]), int(text[8:10]))


@dataclass
class Activity:
    """A tracked habit: its display name, colour and logged dates."""

    name: str
    color: str
    dates: list[str] = field(default_factory=list)
    target_per_day: int = 0

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "color": self.color,
            "dates": list(self.dates),
        }
        if self.target_per_day:
            data["target_per_day"] = self.target_per_day
        return data

    @classmethod
    def from_json(cls, raw: Any) -> "Activity":
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise TypeError("activity must be an object")
        name = raw.get("name") or ""
        color = raw.get("color") or ""
        dates = raw.get("dates") or []
        target = raw.get("target_per_day") or 0
        if not isinstance(name, str) or not isinstance(color, str):
            raise TypeError("name and color must be strings")
        if not isinstance(dates, list) or not all(isinstance(d, str) for d in dates):
            raise TypeError("dates must be a list of strings")
        if isinstance(target, bool) or not isinstance(target, int):
            raise TypeError("target_per_day must be an integer")
        return cls(name=name, color=color, dates=list(dates), target_per_day=target)


@dataclass(frozen=True)
class HabitStats:
    """Summary figures for one habit."""

    name: str
    total_entries: int
    target_per_day: int
    unique_days: int
    current_streak: int


def default_data_path(
    environ: Mapping[str, str] | None = None, platform: str | None = None
) -> str:
    """Return the data file location for this user and operating system."""
    env = os.environ if environ is None else environ
    plat = sys.platform if platform is None else platform

    override = env.get(DATA_FILE_ENV, "")
    if override:
        return override

    home = env.get("HOME", "")
    if plat in ("win32", "windows", "cygwin"):
        config_dir = env.get("APPDATA", "")
        if not config_dir:
            config_dir = os.path.join(env.get("USERPROFILE", ""), "AppData", "Roaming")
    elif plat == "darwin":
        config_dir = os.path.join(home, "Library", "Application Support")
    else:
        config_dir = env.get("XDG_CONFIG_HOME", "")
        if not config_dir:
            config_dir = os.path.join(home, ".config")

    if not config_dir or not home:
        return FALLBACK_DATA_PATH
    return os.path.join(config_dir, "hab", "data", "activities.json")


def current_streak(dates: Iterable[str], today: date | None = None) -> int:
    """Count consecutive logged days ending today, newest first."""
    expected = format_date(today or date.today())
    streak = 0
    for logged in sorted(set(dates), reverse=True):
        if logged != expected:
            break
        streak += 1
        expected = format_date(parse_date(expected) - timedelta(days=1))
    return streak


class HabitManager:
    """Loads, edits and saves the set of tracked habits."""

    def __init__(self, data_file: str | os.PathLike[str] | None = None) -> None:
        self.data_file = Path(data_file if data_file is not None else default_data_path())
        self._activities: dict[str, Activity] = {}

    def load(self) -> None:
        """Read the data file, creating it (and its directory) when missing."""
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise HabitError(f"failed to create data directory: {exc}") from exc

        if not self.data_file.exists():
            self.save()
            return

        try:
            text = self.data_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise HabitError(f"failed to read data file: {exc}") from exc

        try:
            raw = json.loads(text)
            loaded = self._parse(raw)
        except (ValueError, TypeError) as exc:
            raise HabitError(f"failed to parse data file: {exc}") from exc
        self._activities.update(loaded)

    @staticmethod
    def _parse(raw: Any) -> dict[str, Activity]:
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise TypeError("data file must hold an object")
        activities = raw.get("activities")
        if activities is None:
            return {}
        if not isinstance(activities, Mapping):
            raise TypeError("activities must be an object")
        return {key: Activity.from_json(value) for key, value in activities.items()}

    def save(self) -> None:
        """Write all habits to the data file as indented JSON."""
        payload = {
            "activities": {
                key: self._activities[key].to_json() for key in sorted(self._activities)
            }
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        try:
            self.data_file.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise HabitError(f"failed to write data file: {exc}") from exc

    def activities(self) -> dict[str, Activity]:
        """Return every habit keyed by its key."""
        return self._activities

    def get_activity(self, key: str) -> Activity | None:
        """Return the habit with this key, or None."""
        return self._activities.get(key)

    def _require(self, key: str) -> Activity:
        activity = self._activities.get(key)
        if activity is None:
            raise HabitError(f"activity '{key}' does not exist")
        return activity

    def create_activity(
        self, key: str, name: str, color: str, target_per_day: int = 1
    ) -> None:
        """Add a new habit with no entries."""
        if key in self._activities:
            raise HabitError(f"activity '{key}' already exists")
        if target_per_day <= 0:
            target_per_day = 1
        self._activities[key] = Activity(
            name=name, color=color, dates=[], target_per_day=target_per_day
        )
        self.save()

    def add_entry(self, key: str, date_str: str) -> None:
        """Log one completion of a habit on a YYYY-MM-DD date."""
        activity = self._require(key)
        try:
            parse_date(date_str)
        except ValueError:
            raise HabitError(
                f"invalid date format '{date_str}', use YYYY-MM-DD"
            ) from None
        activity.dates.append(date_str)
        self.save()

    def remove_entry(self, key: str, date_str: str) -> None:
        """Remove the first logged completion on the given date."""
        activity = self._require(key)
        try:
            activity.dates.remove(date_str)
        except ValueError:
            raise HabitError(
                f"date '{date_str}' not found in activity '{key}'"
            ) from None
        self.save()

    def delete_activity(self, key: str) -> None:
        """Remove a habit and all its entries."""
        self._require(key)
        del self._activities[key]
        self.save()

    def update_activity(
        self,
        key: str,
        name: str | None = None,
        color: str | None = None,
        target_per_day: int | None = None,
    ) -> None:
        """Change the given fields; empty or non-positive values are left alone."""
        activity = self._require(key)
        if name:
            activity.name = name
        if color:
            activity.color = color
        if target_per_day is not None and target_per_day > 0:
            activity.target_per_day = target_per_day
        self.save()

    def get_stats(self, key: str, today: date | None = None) -> HabitStats:
        """Return totals, unique days and the current streak of a habit."""
        activity = self._require(key)
        return HabitStats(
            name=activity.name,
            total_entries=len(activity.dates),
            target_per_day=activity.target_per_day,
            unique_days=len(set(activity.dates)),
            current_streak=current_streak(activity.dates, today),
        )