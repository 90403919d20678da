"""Starting settings and goals for a new user."""
from __future__ import annotations

from .models import Goals, TherapySettings, TimeSegment

DEFAULT_THERAPY_SETTINGS = TherapySettings(
    basal_segments=(
        TimeSegment.from_clock("00:00", "06:00", 0.5, "1"),
        TimeSegment.from_clock("06:00", "12:00", 0.7, "2"),
        TimeSegment.from_clock("12:00", "18:00", 0.6, "3"),
        TimeSegment.from_clock("18:00", "00:00", 0.55, "4"),
    ),
    icr_segments=(
        TimeSegment.from_clock("00:00", "11:00", 8, "1"),
        TimeSegment.from_clock("11:00", "17:00", 10, "2"),
        TimeSegment.from_clock("17:00", "00:00", 9, "3"),
    ),
    isf_segments=(
        TimeSegment.from_clock("00:00", "06:00", 50, "1"),
        TimeSegment.from_clock("06:00", "12:00", 40, "2"),
        TimeSegment.from_clock("12:00", "00:00", 45, "3"),
    ),
    target_low=80,
    target_high=120,
    active_insulin_time=4,
    correction_target=100,
)

DEFAULT_GOALS = Goals(
    target_tir=70,
    target_range_low=70,
    target_range_high=180,
    max_low_percentage=4,
    max_very_low_percentage=1,
)
