"""Resolve which schedule segment governs a given hour."""
from __future__ import annotations

from typing import Sequence

from .clock import MINUTES_PER_HOUR, hour_to_minute
from .models import TimeSegment


class EmptyScheduleError(ValueError):
    """Raised when a lookup is attempted against a schedule with no segments."""


def resolve_segment(segments: Sequence[TimeSegment], hour: int) -> TimeSegment:
    """Return the first segment whose interval contains ``hour``.

    Segments that start later than they end span midnight. When no segment
    matches (a schedule with gaps) the first segment is returned. An empty
    schedule has no sensible answer and raises :class:`EmptyScheduleError`.
    """

    if not segments:
        raise EmptyScheduleError("Cannot resolve an hour against an empty schedule")
    minute = hour_to_minute(hour)
    for segment in segments:
        if segment.contains(minute):
            return segment
    return segments[0]


def coverage_gaps(segments: Sequence[TimeSegment]) -> list[int]:
    """Hours whose start is not covered by any segment."""

    return [
        hour
        for hour in range(24)
        if not any(segment.contains(hour * MINUTES_PER_HOUR) for segment in segments)
    ]


def overlapping_hours(segments: Sequence[TimeSegment]) -> list[int]:
    """Hours whose start is covered by more than one segment."""

    return [
        hour
        for hour in range(24)
        if sum(segment.contains(hour * MINUTES_PER_HOUR) for segment in segments) > 1
    ]


__all__ = ["EmptyScheduleError", "coverage_gaps", "overlapping_hours", "resolve_segment"]
