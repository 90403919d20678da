"""
Conversion between wire payloads and therapy_insights domain models.
"""
from datetime import date, datetime
from typing import Optional

from models.therapy_models import (
    BasalSegmentPayload,
    GlucoseSummaryPayload,
    GoalsPayload,
    IcrSegmentPayload,
    IsfSegmentPayload,
    ProblemPeriodPayload,
    RecommendationPayload,
    SupportingDataPayload,
    TherapySettingsPayload,
    TimeRangePayload,
)

from therapy_insights.models import (
    EventCounts,
    GlucoseStatistics,
    GlucoseSummary,
    Goals,
    HourlyPattern,
    Priority,
    ProblemPeriod,
    Recommendation,
    RecommendationStatus,
    RecommendationType,
    ReportPeriod,
    SupportingData,
    TherapySettings,
    TimeInRangeBreakdown,
    TimeRange,
    TimeSegment,
)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def summary_from_payload(payload: GlucoseSummaryPayload) -> GlucoseSummary:
    tir = payload.timeInRange
    stats = payload.statistics
    period = None
    if payload.reportPeriod is not None:
        period = ReportPeriod(
            start_date=_parse_date(payload.reportPeriod.startDate),
            end_date=_parse_date(payload.reportPeriod.endDate),
            days=payload.reportPeriod.days,
        )
    return GlucoseSummary(
        time_in_range=TimeInRangeBreakdown(
            very_low=tir.veryLow,
            low=tir.low,
            in_range=tir.inRange,
            high=tir.high,
            very_high=tir.veryHigh,
        ),
        statistics=GlucoseStatistics(
            average_glucose=stats.averageGlucose,
            gmi=stats.gmi,
            standard_deviation=stats.standardDeviation,
            coefficient_of_variation=stats.coefficientOfVariation,
        ),
        hourly_patterns=tuple(
            HourlyPattern(
                hour=entry.hour,
                average_glucose=entry.averageGlucose,
                percentile_10=entry.percentile10,
                percentile_25=entry.percentile25,
                percentile_50=entry.percentile50,
                percentile_75=entry.percentile75,
                percentile_90=entry.percentile90,
                time_in_range=entry.timeInRange,
            )
            for entry in payload.hourlyPatterns
        ),
        events=EventCounts(
            low_events=payload.events.lowEvents,
            high_events=payload.events.highEvents,
        ),
        summary_id=payload.id,
        uploaded_at=_parse_datetime(payload.uploadDate),
        report_period=period,
    )


def settings_from_payload(payload: TherapySettingsPayload) -> TherapySettings:
    return TherapySettings(
        basal_segments=tuple(
            TimeSegment.from_clock(seg.startTime, seg.endTime, seg.rate, seg.id) for seg in payload.basalSegments
        ),
        icr_segments=tuple(
            TimeSegment.from_clock(seg.startTime, seg.endTime, seg.ratio, seg.id) for seg in payload.icrSegments
        ),
        isf_segments=tuple(
            TimeSegment.from_clock(seg.startTime, seg.endTime, seg.factor, seg.id) for seg in payload.isfSegments
        ),
        target_low=payload.targetLow,
        target_high=payload.targetHigh,
        active_insulin_time=payload.activeInsulinTime,
        correction_target=payload.correctionTarget,
    )


def settings_to_payload(settings: TherapySettings) -> TherapySettingsPayload:
    return TherapySettingsPayload(
        basalSegments=[
            BasalSegmentPayload(id=seg.segment_id, startTime=seg.start, endTime=seg.end, rate=seg.value)
            for seg in settings.basal_segments
        ],
        icrSegments=[
            IcrSegmentPayload(id=seg.segment_id, startTime=seg.start, endTime=seg.end, ratio=seg.value)
            for seg in settings.icr_segments
        ],
        isfSegments=[
            IsfSegmentPayload(id=seg.segment_id, startTime=seg.start, endTime=seg.end, factor=seg.value)
            for seg in settings.isf_segments
        ],
        targetLow=settings.target_low,
        targetHigh=settings.target_high,
        activeInsulinTime=settings.active_insulin_time,
        correctionTarget=settings.correction_target,
    )


def goals_from_payload(payload: GoalsPayload) -> Goals:
    return Goals(
        target_tir=payload.targetTIR,
        target_range_low=payload.targetRangeLow,
        target_range_high=payload.targetRangeHigh,
        max_low_percentage=payload.maxLowPercentage,
        max_very_low_percentage=payload.maxVeryLowPercentage,
    )


def recommendation_to_payload(recommendation: Recommendation) -> RecommendationPayload:
    data = recommendation.supporting_data
    return RecommendationPayload(
        id=recommendation.id,
        type=recommendation.type.value,
        priority=recommendation.priority.value,
        timeRange=TimeRangePayload(
            start=recommendation.time_range.start,
            end=recommendation.time_range.end,
            label=recommendation.time_range.label,
        ),
        currentValue=recommendation.current_value,
        suggestedValue=recommendation.suggested_value,
        changePercent=recommendation.change_percent,
        title=recommendation.title,
        rationale=recommendation.rationale,
        supportingData=SupportingDataPayload(
            averageGlucose=data.average_glucose,
            timeInRange=data.time_in_range,
            lowEvents=data.low_events,
            highEvents=data.high_events,
        ),
        generatedAt=recommendation.generated_at.isoformat(),
        status=recommendation.status.value,
        appliedAt=_format_datetime(recommendation.applied_at),
        dismissedAt=_format_datetime(recommendation.dismissed_at),
        previousValue=recommendation.previous_value,
    )


def recommendation_from_payload(payload: RecommendationPayload) -> Recommendation:
    data = payload.supportingData
    generated_at = _parse_datetime(payload.generatedAt)
    if generated_at is None:
        raise ValueError(f"Recommendation {payload.id} has an invalid generatedAt: {payload.generatedAt!r}")
    return Recommendation(
        id=payload.id,
        type=RecommendationType(payload.type.value),
        priority=Priority(payload.priority.value),
        time_range=TimeRange(
            start=payload.timeRange.start,
            end=payload.timeRange.end,
            label=payload.timeRange.label,
        ),
        current_value=payload.currentValue,
        suggested_value=payload.suggestedValue,
        change_percent=payload.changePercent,
        title=payload.title,
        rationale=payload.rationale,
        supporting_data=SupportingData(
            average_glucose=data.averageGlucose,
            time_in_range=data.timeInRange,
            low_events=data.lowEvents,
            high_events=data.highEvents,
        ),
        generated_at=generated_at,
        status=RecommendationStatus(payload.status.value),
        applied_at=_parse_datetime(payload.appliedAt),
        dismissed_at=_parse_datetime(payload.dismissedAt),
        previous_value=payload.previousValue,
    )


def problem_period_to_payload(problem: ProblemPeriod) -> ProblemPeriodPayload:
    return ProblemPeriodPayload(
        startHour=problem.start_hour,
        endHour=problem.end_hour,
        type=problem.type.value,
        severity=problem.severity.value,
        averageGlucose=problem.average_glucose,
        timeInRange=problem.time_in_range,
        description=problem.description,
    )
