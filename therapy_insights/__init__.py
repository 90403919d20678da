"""Glycemic pattern analysis and pump-settings recommendation library."""

from .applicator import apply_recommendation
from .engine import RecommendationEngine, generate_recommendation
from .models import (
    AnalysisContext,
    EventCounts,
    GlucoseStatistics,
    GlucoseSummary,
    Goals,
    HourlyPattern,
    Priority,
    ProblemPeriod,
    ProblemType,
    Recommendation,
    RecommendationStatus,
    RecommendationType,
    Severity,
    SupportingData,
    TherapySettings,
    TimeInRangeBreakdown,
    TimeRange,
    TimeSegment,
)
from .problem_periods import guidance_for, identify_problem_periods
from .registry import register_check, registry
from .check_base import RecommendationCheck
from .segments import EmptyScheduleError, resolve_segment
from .session import NoPendingRecommendationError, RecommendationSession

__all__ = [
    "AnalysisContext",
    "EmptyScheduleError",
    "EventCounts",
    "GlucoseStatistics",
    "GlucoseSummary",
    "Goals",
    "HourlyPattern",
    "NoPendingRecommendationError",
    "Priority",
    "ProblemPeriod",
    "ProblemType",
    "Recommendation",
    "RecommendationCheck",
    "RecommendationEngine",
    "RecommendationSession",
    "RecommendationStatus",
    "RecommendationType",
    "Severity",
    "SupportingData",
    "TherapySettings",
    "TimeInRangeBreakdown",
    "TimeRange",
    "TimeSegment",
    "apply_recommendation",
    "generate_recommendation",
    "guidance_for",
    "identify_problem_periods",
    "register_check",
    "registry",
    "resolve_segment",
]
