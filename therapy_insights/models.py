"""Core data models for therapy pattern analysis."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Sequence

from .clock import MINUTES_PER_DAY, format_clock, parse_clock

if TYPE_CHECKING:
    import pandas as pd

    from .features import WindowStats


class RecommendationType(str, Enum):
    """Therapy parameter a recommendation adjusts."""

    BASAL = "basal"
    ICR = "icr"
    ISF = "isf"
    TARGET = "target"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class RecommendationStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    DISMISSED = "dismissed"


class ProblemType(str, Enum):
    LOW = "low"
    HIGH = "high"
    VARIABLE = "variable"

    @property
    def rank(self) -> int:
        return _PROBLEM_TYPE_RANK[self]


_PROBLEM_TYPE_RANK = {ProblemType.LOW: 0, ProblemType.VARIABLE: 1, ProblemType.HIGH: 2}


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.SEVERE: 0, Severity.MODERATE: 1, Severity.MILD: 2}


@dataclass(frozen=True)
class TimeSegment:
    """One entry of a time-of-day schedule.

    Times are minutes since midnight. A segment whose start is later than its
    end spans midnight; ``wraps`` records that once at construction.
    """

    start_minute: int
    end_minute: int
    value: float
    segment_id: Optional[str] = None
    wraps: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        for minute in (self.start_minute, self.end_minute):
            if not 0 <= minute <= MINUTES_PER_DAY:
                raise ValueError(f"Segment boundary {minute} outside a single day")
        object.__setattr__(self, "wraps", self.start_minute > self.end_minute)

    @classmethod
    def from_clock(
        cls,
        start: str,
        end: str,
        value: float,
        segment_id: Optional[str] = None,
    ) -> "TimeSegment":
        return cls(parse_clock(start), parse_clock(end), float(value), segment_id)

    @property
    def start(self) -> str:
        return format_clock(self.start_minute)

    @property
    def end(self) -> str:
        return format_clock(self.end_minute)

    def contains(self, minute: int) -> bool:
        if self.wraps:
            return minute >= self.start_minute or minute < self.end_minute
        return self.start_minute <= minute < self.end_minute

    def spans(self, bounds: tuple[int, int]) -> bool:
        """True when this segment covers exactly the ``(start, end)`` minute range."""

        return (self.start_minute, self.end_minute) == bounds


@dataclass(frozen=True)
class HourlyPattern:
    """Aggregated statistics for one hour of the day across a report."""

    hour: int
    average_glucose: float
    percentile_10: float
    percentile_25: float
    percentile_50: float
    percentile_75: float
    percentile_90: float
    time_in_range: float


@dataclass(frozen=True)
class TimeInRangeBreakdown:
    """Percent of readings in each glucose band."""

    very_low: float
    low: float
    in_range: float
    high: float
    very_high: float

    @property
    def total_low(self) -> float:
        return self.very_low + self.low

    @property
    def total_high(self) -> float:
        return self.high + self.very_high


@dataclass(frozen=True)
class GlucoseStatistics:
    average_glucose: float
    gmi: float
    standard_deviation: float
    coefficient_of_variation: float


@dataclass(frozen=True)
class EventCounts:
    low_events: int = 0
    high_events: int = 0


@dataclass(frozen=True)
class ReportPeriod:
    start_date: Optional[date]
    end_date: Optional[date]
    days: Optional[int] = None


@dataclass(frozen=True)
class GlucoseSummary:
    """Report-level CGM aggregate consumed by the analysis."""

    time_in_range: TimeInRangeBreakdown
    statistics: GlucoseStatistics
    hourly_patterns: Sequence[HourlyPattern]
    events: EventCounts = field(default_factory=EventCounts)
    summary_id: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    report_period: Optional[ReportPeriod] = None
    frame_cache: dict[str, "pd.DataFrame"] = field(default_factory=dict, repr=False, compare=False)
    window_cache: dict[tuple[int, ...], "WindowStats"] = field(
        default_factory=dict,
        repr=False,
        compare=False,
    )

    def pattern_for(self, hour: int) -> Optional[HourlyPattern]:
        for pattern in self.hourly_patterns:
            if pattern.hour == hour:
                return pattern
        return None

    def hourly_frame(self) -> "pd.DataFrame":
        """Return a cached dataframe view of the hourly patterns."""

        cached = self.frame_cache.get("hourly")
        if cached is not None:
            return cached

        from .features import hourly_frame  # Local import to avoid circular dependency

        frame = hourly_frame(self.hourly_patterns)
        self.frame_cache["hourly"] = frame
        return frame

    def window(self, hours: Iterable[int]) -> "WindowStats":
        """Return cached mean glucose and TIR over the given hours."""

        key = tuple(sorted(set(hours)))
        cached = self.window_cache.get(key)
        if cached is not None:
            return cached

        from .features import window_stats  # Local import to avoid circular dependency

        stats = window_stats(self.hourly_frame(), key)
        self.window_cache[key] = stats
        return stats


@dataclass(frozen=True)
class TherapySettings:
    """Pump therapy settings; replaced, never mutated."""

    basal_segments: Sequence[TimeSegment]
    icr_segments: Sequence[TimeSegment]
    isf_segments: Sequence[TimeSegment]
    target_low: float
    target_high: float
    active_insulin_time: float
    correction_target: float

    def segments_for(self, recommendation_type: RecommendationType) -> Sequence[TimeSegment]:
        if recommendation_type is RecommendationType.BASAL:
            return self.basal_segments
        if recommendation_type is RecommendationType.ICR:
            return self.icr_segments
        if recommendation_type is RecommendationType.ISF:
            return self.isf_segments
        raise ValueError(f"No segment schedule for recommendation type {recommendation_type.value!r}")

    def with_segments(
        self,
        recommendation_type: RecommendationType,
        segments: Iterable[TimeSegment],
    ) -> "TherapySettings":
        updated = tuple(segments)
        if recommendation_type is RecommendationType.BASAL:
            return replace(self, basal_segments=updated)
        if recommendation_type is RecommendationType.ICR:
            return replace(self, icr_segments=updated)
        if recommendation_type is RecommendationType.ISF:
            return replace(self, isf_segments=updated)
        raise ValueError(f"No segment schedule for recommendation type {recommendation_type.value!r}")


@dataclass(frozen=True)
class Goals:
    target_tir: float
    target_range_low: float
    target_range_high: float
    max_low_percentage: float
    max_very_low_percentage: float


@dataclass(frozen=True)
class ProblemPeriod:
    """A block of the day whose aggregate glucose needs attention."""

    start_hour: int
    end_hour: int
    type: ProblemType
    severity: Severity
    average_glucose: float
    time_in_range: float
    description: str


@dataclass(frozen=True)
class TimeRange:
    start: str
    end: str
    label: str

    def bounds(self) -> Optional[tuple[int, int]]:
        """Start and end as minutes since midnight, or ``None`` if either is not a valid time."""

        try:
            return parse_clock(self.start), parse_clock(self.end)
        except ValueError:
            return None


@dataclass(frozen=True)
class SupportingData:
    average_glucose: Optional[int] = None
    time_in_range: Optional[int] = None
    low_events: Optional[int] = None
    high_events: Optional[int] = None


@dataclass(frozen=True)
class Recommendation:
    """A single proposed change to one therapy parameter."""

    id: str
    type: RecommendationType
    priority: Priority
    time_range: TimeRange
    current_value: float
    suggested_value: float
    change_percent: float
    title: str
    rationale: str
    supporting_data: SupportingData
    generated_at: datetime
    status: RecommendationStatus = RecommendationStatus.PENDING
    source_check: Optional[str] = None
    applied_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    previous_value: Optional[float] = None


@dataclass(frozen=True)
class AnalysisContext:
    """Auxiliary configuration passed to each check."""

    thresholds: Mapping[str, Any] = field(default_factory=dict)
    check_settings: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)
    analysis_time: Optional[datetime] = None

    def check_threshold(self, check_id: str, key: str, default: Any) -> Any:
        """Return check-specific override, falling back to global thresholds"""

        check_specific = self.check_settings.get(check_id, {})
        if key in check_specific:
            return check_specific[key]
        return self.thresholds.get(key, default)

    def timestamp(self) -> datetime:
        return self.analysis_time or datetime.now(timezone.utc)
