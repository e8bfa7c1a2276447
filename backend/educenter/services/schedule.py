"""Weekday and time-of-day helpers shared by the conflict checker and room availability."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, time

from educenter.models.group import DayOfWeek

DAY_ORDER: tuple[str, ...] = tuple(day.value for day in DayOfWeek)
DAY_VALUES = frozenset(DAY_ORDER)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d:[0-5]\d$")
SHORT_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Hourly business-hours slots offered as alternatives when a room is taken.
BUSINESS_HOURS_SLOTS: tuple[time, ...] = tuple(time(hour=hour) for hour in range(8, 19))


def normalize_days(values: Iterable[str | DayOfWeek]) -> list[str]:
    """Uppercase, validate and de-duplicate weekday tokens keeping first-seen order."""
    seen: set[str] = set()
    days: list[str] = []
    for value in values:
        token = (value.value if isinstance(value, DayOfWeek) else str(value)).strip().upper()
        if token not in DAY_VALUES:
            raise ValueError(f"Invalid day value: {value}")
        if token in seen:
            continue
        seen.add(token)
        days.append(token)
    return days


def intersect_days(candidate: Iterable[str], existing: Iterable[str]) -> list[str]:
    """Days present in both sequences, in the candidate's order."""
    existing_set = set(existing)
    return [day for day in candidate if day in existing_set]


def days_overlap(candidate: Iterable[str], existing: Iterable[str]) -> bool:
    return bool(set(candidate) & set(existing))


def parse_time(value: str | time) -> time:
    """Parse ``HH:mm:ss`` (or ``HH:mm``) into a ``datetime.time``."""
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    stripped = value.strip()
    if SHORT_TIME_PATTERN.match(stripped):
        stripped = f"{stripped}:00"
    if not TIME_PATTERN.match(stripped):
        raise ValueError("Time must be in format HH:mm:ss (e.g., 09:00:00)")
    hours, minutes, seconds = (int(part) for part in stripped.split(":"))
    return time(hour=hours, minute=minutes, second=seconds)


def format_time(value: time | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%H:%M:%S")


def format_date(value: date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def sort_days(days: Iterable[str]) -> list[str]:
    return sorted(set(days), key=DAY_ORDER.index)


def empty_day_counter() -> dict[str, int]:
    return {day: 0 for day in DAY_ORDER}
