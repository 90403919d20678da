from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from therapy_insights.checks.correction_factor import CorrectionFactorCheck
from therapy_insights.checks.general_high import GeneralHighCheck
from therapy_insights.checks.low_glucose import LowGlucoseCheck
from therapy_insights.checks.meal_spike import MealSpikeCheck
from therapy_insights.checks.overnight import OvernightCheck
from therapy_insights.defaults import DEFAULT_GOALS, DEFAULT_THERAPY_SETTINGS
from therapy_insights.features import percent_change, round_half_up, round_whole
from therapy_insights.models import (
    AnalysisContext,
    EventCounts,
    GlucoseStatistics,
    GlucoseSummary,
    HourlyPattern,
    Priority,
    RecommendationType,
    TherapySettings,
    TimeInRangeBreakdown,
    TimeSegment,
)

ANALYSIS_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
CONTEXT = AnalysisContext(analysis_time=ANALYSIS_TIME)


def _pattern(hour: int, average: float, tir: float = 80.0) -> HourlyPattern:
    return HourlyPattern(
        hour=hour,
        average_glucose=average,
        percentile_10=average - 25,
        percentile_25=average - 10,
        percentile_50=average,
        percentile_75=average + 10,
        percentile_90=average + 25,
        time_in_range=tir,
    )


def _summary(
    overrides: dict[int, tuple[float, float]] | None = None,
    *,
    tir: tuple[float, float, float, float, float] = (0, 2, 80, 15, 3),
    average: float = 140.0,
    cv: float = 30.0,
    low_events: int = 0,
    high_events: int = 0,
) -> GlucoseSummary:
    overrides = overrides or {}
    very_low, low, in_range, high, very_high = tir
    return GlucoseSummary(
        time_in_range=TimeInRangeBreakdown(
            very_low=very_low, low=low, in_range=in_range, high=high, very_high=very_high
        ),
        statistics=GlucoseStatistics(
            average_glucose=average, gmi=7.0, standard_deviation=average * cv / 100, coefficient_of_variation=cv
        ),
        hourly_patterns=[_pattern(hour, *overrides.get(hour, (120.0, 80.0))) for hour in range(24)],
        events=EventCounts(low_events=low_events, high_events=high_events),
    )


def _settings(basal=None, icr=None, isf=None) -> TherapySettings:
    def _segments(entries, fallback):
        if entries is None:
            return fallback
        return tuple(TimeSegment.from_clock(start, end, value) for start, end, value in entries)

    return TherapySettings(
        basal_segments=_segments(basal, DEFAULT_THERAPY_SETTINGS.basal_segments),
        icr_segments=_segments(icr, DEFAULT_THERAPY_SETTINGS.icr_segments),
        isf_segments=_segments(isf, DEFAULT_THERAPY_SETTINGS.isf_segments),
        target_low=80,
        target_high=120,
        active_insulin_time=4,
        correction_target=100,
    )


BASAL = (
    ("00:00", "06:00", 1.0),
    ("06:00", "12:00", 0.8),
    ("12:00", "18:00", 0.6),
    ("18:00", "00:00", 0.55),
)


def test_rounding_helpers_round_halves_up():
    assert round_half_up(0.5 * 0.95, 2) == 0.48
    assert round_half_up(2.25, 1) == 2.3
    assert round_whole(14.5) == 15
    assert round_whole(-2.5) == -2
    assert percent_change(0.95) == -5
    assert percent_change(1.05) == 5


def test_quiet_summary_triggers_no_check():
    summary = _summary()
    for check in (LowGlucoseCheck(), OvernightCheck(), MealSpikeCheck(), GeneralHighCheck(), CorrectionFactorCheck()):
        assert check.evaluate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT) is None


def test_low_glucose_reduces_basal_for_lowest_hour():
    summary = _summary({2: (65.0, 40.0)}, tir=(1, 5, 60, 25, 9), low_events=7)

    rec = LowGlucoseCheck().evaluate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.type is RecommendationType.BASAL
    assert rec.priority is Priority.HIGH
    assert rec.current_value == 0.5
    assert rec.suggested_value == 0.48
    assert rec.change_percent == -5
    assert (rec.time_range.start, rec.time_range.end) == ("00:00", "06:00")
    assert rec.time_range.label == "12am - 6am"
    assert rec.supporting_data.average_glucose == 65
    assert rec.supporting_data.time_in_range == 40
    assert rec.supporting_data.low_events == 7
    assert rec.generated_at == ANALYSIS_TIME
    assert rec.id == f"rec-{int(ANALYSIS_TIME.timestamp() * 1000)}"


def test_low_glucose_needs_time_below_range_over_goal():
    summary = _summary({2: (65.0, 40.0)}, tir=(1, 3, 80, 14, 2))

    assert LowGlucoseCheck().evaluate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT) is None


def test_low_glucose_picks_lowest_average_hour():
    summary = _summary({9: (75.0, 60.0), 14: (68.0, 50.0)}, tir=(2, 6, 70, 18, 4))

    rec = LowGlucoseCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert (rec.time_range.start, rec.time_range.end) == ("12:00", "18:00")
    assert rec.supporting_data.average_glucose == 68


def test_low_glucose_flags_hour_by_lower_quartile():
    base = _summary(tir=(1, 5, 70, 20, 4))
    patterns = [
        replace(pattern, average_glucose=95.0, percentile_25=62.0) if pattern.hour == 15 else pattern
        for pattern in base.hourly_patterns
    ]
    summary = GlucoseSummary(
        time_in_range=base.time_in_range,
        statistics=base.statistics,
        hourly_patterns=patterns,
        events=base.events,
    )

    rec = LowGlucoseCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert (rec.time_range.start, rec.time_range.end) == ("12:00", "18:00")
    assert rec.suggested_value == 0.57
    assert rec.supporting_data.average_glucose == 95


def test_low_glucose_without_basal_schedule_returns_none():
    summary = _summary({2: (65.0, 40.0)}, tir=(1, 5, 60, 25, 9))
    settings = _settings(basal=())

    assert LowGlucoseCheck().evaluate(summary, settings, DEFAULT_GOALS, CONTEXT) is None


def test_overnight_dawn_rise_targets_four_am_segment():
    overrides = {hour: (200.0, 40.0) for hour in (3, 4, 5, 6)}
    summary = _summary(overrides)

    rec = OvernightCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.title == "Address Dawn Phenomenon"
    assert rec.priority is Priority.MEDIUM
    assert rec.current_value == 1.0
    assert rec.suggested_value == 1.05
    assert rec.change_percent == 5
    assert rec.supporting_data.average_glucose == 200
    # Overnight TIR covers hours 23 and 0-5.
    assert rec.supporting_data.time_in_range == round_whole((80 * 4 + 40 * 3) / 7)


def test_overnight_highs_without_dawn_rise():
    overrides = {hour: (200.0, 40.0) for hour in (23, 0, 1, 2, 3, 4, 5)}
    summary = _summary(overrides)

    rec = OvernightCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.title == "Reduce Overnight Highs"
    assert (rec.time_range.start, rec.time_range.end) == ("00:00", "06:00")
    assert rec.suggested_value == 1.05


def test_overnight_dawn_rise_below_target_is_ignored():
    overrides = {hour: (70.0, 80.0) for hour in (0, 1, 2)}
    overrides.update({hour: (150.0, 80.0) for hour in (3, 4, 5, 6)})

    assert OvernightCheck().evaluate(_summary(overrides), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT) is None


def test_overnight_highs_with_acceptable_time_in_range_are_ignored():
    overrides = {hour: (200.0, 70.0) for hour in (23, 0, 1, 2, 3, 4, 5)}

    assert OvernightCheck().evaluate(_summary(overrides), _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT) is None


def test_meal_spike_strengthens_breakfast_ratio():
    overrides = {hour: (230.0, 30.0) for hour in (7, 8, 9, 10)}
    summary = _summary(overrides, high_events=12)
    settings = _settings(icr=(("00:00", "11:00", 10), ("11:00", "17:00", 9), ("17:00", "00:00", 8)))

    rec = MealSpikeCheck().evaluate(summary, settings, DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.type is RecommendationType.ICR
    assert rec.title == "Adjust Breakfast Carb Ratio"
    assert rec.time_range.label == "Breakfast time"
    assert rec.current_value == 10
    assert rec.suggested_value == 9.5
    assert rec.change_percent == -5
    assert rec.supporting_data.high_events == 12


def test_meal_spike_first_qualifying_meal_wins():
    overrides = {hour: (230.0, 30.0) for hour in (7, 8, 9, 10, 18, 19, 20, 21)}

    rec = MealSpikeCheck().evaluate(_summary(overrides), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.title == "Adjust Breakfast Carb Ratio"


def test_meal_spike_clamps_index_to_available_segments():
    overrides = {hour: (240.0, 20.0) for hour in (18, 19, 20, 21)}
    settings = _settings(icr=(("00:00", "24:00", 12),))

    rec = MealSpikeCheck().evaluate(_summary(overrides), settings, DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.title == "Adjust Dinner Carb Ratio"
    assert rec.current_value == 12
    assert (rec.time_range.start, rec.time_range.end) == ("00:00", "24:00")


def test_meal_spike_safety_floor_rejects_candidate():
    overrides = {hour: (230.0, 30.0) for hour in (7, 8, 9, 10)}
    summary = _summary(overrides)

    floored = _settings(icr=(("00:00", "24:00", 3),))
    assert MealSpikeCheck().evaluate(summary, floored, DEFAULT_GOALS, CONTEXT) is None

    at_floor = _settings(icr=(("00:00", "24:00", 3.2),))
    rec = MealSpikeCheck().evaluate(summary, at_floor, DEFAULT_GOALS, CONTEXT)
    assert rec is not None
    assert rec.suggested_value == 3.0


def test_general_high_targets_worst_non_meal_hour():
    overrides = {8: (300.0, 10.0), 15: (230.0, 30.0), 16: (250.0, 20.0)}
    summary = _summary(overrides, tir=(0, 1, 55, 34, 10), high_events=9)

    rec = GeneralHighCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.priority is Priority.LOW
    assert rec.title == "Reduce High Glucose Patterns"
    assert (rec.time_range.start, rec.time_range.end) == ("12:00", "18:00")
    assert rec.current_value == 0.6
    assert rec.suggested_value == 0.63
    assert rec.supporting_data.average_glucose == 250
    assert rec.supporting_data.high_events == 9


def test_general_high_skipped_when_time_in_range_meets_goal():
    overrides = {16: (250.0, 20.0)}
    summary = _summary(overrides, tir=(0, 0, 70, 25, 5))

    assert GeneralHighCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT) is None


def test_general_high_ignores_meal_hours_only():
    overrides = {hour: (260.0, 10.0) for hour in (7, 8, 12, 13, 19)}
    summary = _summary(overrides, tir=(0, 1, 55, 34, 10))

    assert GeneralHighCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT) is None


def test_general_high_needs_enough_time_above_range():
    overrides = {16: (250.0, 20.0)}
    summary = _summary(overrides, tir=(0, 1, 60, 15, 5))

    assert GeneralHighCheck().evaluate(summary, _settings(basal=BASAL), DEFAULT_GOALS, CONTEXT) is None


def test_correction_factor_strengthens_first_isf_segment():
    summary = _summary(average=190.0, cv=40.0)
    settings = _settings(isf=(("00:00", "12:00", 40), ("12:00", "00:00", 50)))

    rec = CorrectionFactorCheck().evaluate(summary, settings, DEFAULT_GOALS, CONTEXT)

    assert rec is not None
    assert rec.type is RecommendationType.ISF
    assert rec.current_value == 40
    assert rec.suggested_value == 38
    assert rec.change_percent == -5
    assert rec.supporting_data.average_glucose == 190


def test_correction_factor_safety_floor():
    summary = _summary(average=190.0, cv=40.0)

    below = _settings(isf=(("00:00", "24:00", 15),))
    assert CorrectionFactorCheck().evaluate(summary, below, DEFAULT_GOALS, CONTEXT) is None

    at_floor = _settings(isf=(("00:00", "24:00", 16),))
    rec = CorrectionFactorCheck().evaluate(summary, at_floor, DEFAULT_GOALS, CONTEXT)
    assert rec is not None
    assert rec.suggested_value == 15


def test_correction_factor_requires_mean_above_target():
    summary = _summary(average=170.0, cv=45.0)

    assert CorrectionFactorCheck().evaluate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, CONTEXT) is None


def test_check_specific_threshold_overrides_global():
    summary = _summary(average=190.0, cv=40.0)
    check = CorrectionFactorCheck()

    stricter = AnalysisContext(
        thresholds={"cv_threshold": 30},
        check_settings={"correction_factor": {"cv_threshold": 45}},
        analysis_time=ANALYSIS_TIME,
    )
    assert check.evaluate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, stricter) is None

    looser = AnalysisContext(thresholds={"cv_threshold": 30}, analysis_time=ANALYSIS_TIME)
    assert check.evaluate(_summary(average=190.0, cv=35.0), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS, looser)
