"""Time-of-day helpers shared by schedules and problem periods."""
from __future__ import annotations

import re
from typing import Final

MINUTES_PER_HOUR: Final[int] = 60
MINUTES_PER_DAY: Final[int] = 24 * MINUTES_PER_HOUR

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_clock(value: str) -> int:
    """Convert an ``HH:MM`` string into minutes since midnight.

    ``24:00`` is accepted as the end-of-day boundary (1440).
    """

    match = _CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid time of day {value!r}; expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= MINUTES_PER_HOUR:
        raise ValueError(f"Invalid minutes in time of day {value!r}")
    total = hours * MINUTES_PER_HOUR + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"Time of day {value!r} is past 24:00")
    return total


def format_clock(minute: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""

    if not 0 <= minute <= MINUTES_PER_DAY:
        raise ValueError(f"Minute {minute} outside a single day")
    hours, minutes = divmod(minute, MINUTES_PER_HOUR)
    return f"{hours:02d}:{minutes:02d}"


def hour_to_minute(hour: int) -> int:
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be between 0 and 23, got {hour}")
    return hour * MINUTES_PER_HOUR


def _format_label_time(value: str) -> str:
    minute = parse_clock(value)
    hours, minutes = divmod(minute, MINUTES_PER_HOUR)
    period = "pm" if hours >= 12 else "am"
    if hours == 0:
        display_hour = 12
    elif hours > 12:
        display_hour = hours - 12
    else:
        display_hour = hours
    suffix = f":{minutes:02d}" if minutes > 0 else ""
    return f"{display_hour}{suffix}{period}"


def time_range_label(start: str, end: str) -> str:
    """Human label for a schedule range, e.g. ``"10pm - 6am"``."""

    return f"{_format_label_time(start)} - {_format_label_time(end)}"


def format_hour(hour: int) -> str:
    if hour in (0, 24):
        return "12am"
    if hour == 12:
        return "12pm"
    if hour < 12:
        return f"{hour}am"
    return f"{hour - 12}pm"


def format_hour_range(start_hour: int, end_hour: int) -> str:
    return f"{format_hour(start_hour)} – {format_hour(end_hour)}"


__all__ = [
    "MINUTES_PER_DAY",
    "MINUTES_PER_HOUR",
    "format_clock",
    "format_hour",
    "format_hour_range",
    "hour_to_minute",
    "parse_clock",
    "time_range_label",
]
