"""Feature helpers over hourly CGM patterns."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Iterable, Sequence

import numpy as np
import pandas as pd

from .models import HourlyPattern

HOURLY_COLUMNS: Final[tuple[str, ...]] = (
    "hour",
    "average_glucose",
    "percentile_10",
    "percentile_25",
    "percentile_50",
    "percentile_75",
    "percentile_90",
    "time_in_range",
)


@dataclass(frozen=True)
class WindowStats:
    """Unweighted means over the hours of a window that have data."""

    hours: tuple[int, ...]
    average_glucose: float
    time_in_range: float

    @property
    def empty(self) -> bool:
        return not self.hours


def hourly_frame(patterns: Sequence[HourlyPattern]) -> pd.DataFrame:
    """Tabulate hourly patterns, one row per record in input order."""

    rows = [
        {
            "hour": pattern.hour,
            "average_glucose": pattern.average_glucose,
            "percentile_10": pattern.percentile_10,
            "percentile_25": pattern.percentile_25,
            "percentile_50": pattern.percentile_50,
            "percentile_75": pattern.percentile_75,
            "percentile_90": pattern.percentile_90,
            "time_in_range": pattern.time_in_range,
        }
        for pattern in patterns
    ]
    frame = pd.DataFrame(rows, columns=list(HOURLY_COLUMNS))
    frame["hour"] = frame["hour"].astype(int)
    return frame


def window_stats(frame: pd.DataFrame, hours: Iterable[int]) -> WindowStats:
    """Average glucose and time-in-range across rows whose hour is in ``hours``.

    An empty window yields NaN means, which fail every threshold comparison.
    """

    subset = frame.loc[frame["hour"].isin(list(hours))]
    if subset.empty:
        return WindowStats(hours=(), average_glucose=float("nan"), time_in_range=float("nan"))
    return WindowStats(
        hours=tuple(int(hour) for hour in subset["hour"]),
        average_glucose=float(np.mean(subset["average_glucose"].to_numpy(dtype=float))),
        time_in_range=float(np.mean(subset["time_in_range"].to_numpy(dtype=float))),
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, so 0.475 U/hr becomes 0.48 rather than 0.47."""

    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def round_whole(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent_change(factor: float) -> int:
    """Whole-percent change implied by a multiplicative factor (0.95 -> -5)."""

    return round_whole((factor - 1.0) * 100)
