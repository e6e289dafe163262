"""
Schedule Conflict Checking

Pure functions, no database access. Times are "HH:MM" strings, zero-padded
24-hour, converted to minutes since midnight before any comparison. Windows
are half-open: a slot ending at 09:00 does not clash with one starting at
09:00.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from edutrack.modules.timetables.models import DayOfWeek

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        ValueError: Not a zero-padded 24-hour time
    """
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time format (HH:MM): {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class TimeWindow:
    start: int
    end: int

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeWindow":
        return cls(parse_time(start), parse_time(end))

    @property
    def minutes(self) -> int:
        return self.end - self.start


def windows_overlap(a: TimeWindow, b: TimeWindow) -> bool:
    return a.start < b.end and b.start < a.end


@dataclass(frozen=True)
class Assignment:
    """One booking of a resource (teacher or room) on a weekday."""

    resource_id: str
    day: DayOfWeek
    window: TimeWindow
    slot_id: str | None = None


def conflicts_with(candidate: Assignment, other: Assignment) -> bool:
    if candidate.slot_id is not None and candidate.slot_id == other.slot_id:
        return False
    return (
        candidate.resource_id == other.resource_id
        and candidate.day == other.day
        and windows_overlap(candidate.window, other.window)
    )


def find_conflict(candidate: Assignment, existing: Iterable[Assignment]) -> Assignment | None:
    """First existing assignment that clashes with the candidate, if any."""
    for other in existing:
        if conflicts_with(candidate, other):
            return other
    return None


def has_conflict(candidate: Assignment, existing: Iterable[Assignment]) -> bool:
    return find_conflict(candidate, existing) is not None
