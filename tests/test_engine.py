from datetime import datetime, timezone
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from therapy_insights.check_base import RecommendationCheck
from therapy_insights.checks.low_glucose import LowGlucoseCheck
from therapy_insights.checks.meal_spike import MealSpikeCheck
from therapy_insights.checks.overnight import OvernightCheck
from therapy_insights.defaults import DEFAULT_GOALS, DEFAULT_THERAPY_SETTINGS
from therapy_insights.engine import RecommendationEngine, generate_recommendation
from therapy_insights.models import (
    EventCounts,
    GlucoseStatistics,
    GlucoseSummary,
    HourlyPattern,
    Priority,
    TimeInRangeBreakdown,
)
from therapy_insights.registry import CheckRegistry, registry

FIXED_TIME = datetime(2024, 6, 3, 8, 30, tzinfo=timezone.utc)


def _summary(overrides, tir=(0, 2, 80, 15, 3)) -> GlucoseSummary:
    patterns = []
    for hour in range(24):
        average, hour_tir = overrides.get(hour, (120.0, 80.0))
        patterns.append(
            HourlyPattern(hour, average, average - 25, average - 10, average, average + 10, average + 25, hour_tir)
        )
    return GlucoseSummary(
        time_in_range=TimeInRangeBreakdown(*tir),
        statistics=GlucoseStatistics(average_glucose=150, gmi=6.9, standard_deviation=45, coefficient_of_variation=30),
        hourly_patterns=patterns,
        events=EventCounts(low_events=4, high_events=6),
    )


def _lows_and_breakfast_spikes() -> GlucoseSummary:
    overrides = {2: (65.0, 40.0)}
    overrides.update({hour: (230.0, 30.0) for hour in (7, 8, 9, 10)})
    return _summary(overrides, tir=(1, 5, 60, 25, 9))


def test_default_registry_holds_checks_in_order():
    assert [check_id for check_id, _ in registry.items()] == [
        "low_glucose",
        "overnight",
        "meal_spike",
        "general_high",
        "correction_factor",
    ]


def test_high_priority_candidate_beats_earlier_evaluated_medium():
    engine = RecommendationEngine(clock=lambda: FIXED_TIME)
    summary = _lows_and_breakfast_spikes()

    candidates = engine.candidates(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS)
    selected = engine.generate(summary, DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS)

    assert [c.source_check for c in candidates] == ["low_glucose", "meal_spike"]
    assert selected is not None
    assert selected.source_check == "low_glucose"
    assert selected.priority is Priority.HIGH
    assert selected.suggested_value == 0.48
    assert selected.generated_at == FIXED_TIME


def test_equal_priority_ties_go_to_earlier_check():
    overrides = {hour: (200.0, 40.0) for hour in (3, 4, 5, 6)}
    overrides.update({hour: (230.0, 30.0) for hour in (7, 8, 9, 10)})
    engine = RecommendationEngine(clock=lambda: FIXED_TIME)

    selected = engine.generate(_summary(overrides), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS)

    assert selected is not None
    assert selected.source_check == "overnight"
    assert selected.priority is Priority.MEDIUM


def test_generate_returns_none_when_nothing_triggers():
    assert generate_recommendation(_summary({}), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS) is None


def test_predicate_filters_checks():
    engine = RecommendationEngine(clock=lambda: FIXED_TIME)

    selected = engine.generate(
        _lows_and_breakfast_spikes(),
        DEFAULT_THERAPY_SETTINGS,
        DEFAULT_GOALS,
        predicate=lambda check: check.priority is not Priority.HIGH,
    )

    assert selected is not None
    assert selected.source_check == "meal_spike"


def test_engine_accepts_local_registry():
    local = CheckRegistry()
    local.register(MealSpikeCheck)
    local.register(OvernightCheck)
    engine = RecommendationEngine(local, clock=lambda: FIXED_TIME)

    assert [check.id for check in local.values()] == ["overnight", "meal_spike"]
    selected = engine.generate(_lows_and_breakfast_spikes(), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS)
    assert selected is not None
    assert selected.source_check == "meal_spike"


def test_default_thresholds_apply_when_no_context_given():
    engine = RecommendationEngine(
        clock=lambda: FIXED_TIME,
        default_check_settings={"low_glucose": {"basal_decrease_factor": 0.9}},
    )

    selected = engine.generate(_lows_and_breakfast_spikes(), DEFAULT_THERAPY_SETTINGS, DEFAULT_GOALS)

    assert selected is not None
    assert selected.suggested_value == 0.45
    assert selected.change_percent == -10


def test_registry_rejects_duplicate_ids():
    local = CheckRegistry()
    local.register(LowGlucoseCheck)

    with pytest.raises(ValueError):
        local.register(LowGlucoseCheck)

    assert isinstance(local.get("low_glucose"), LowGlucoseCheck)
    local.clear()
    assert list(local.values()) == []


def test_check_requires_id():
    with pytest.raises(ValueError):

        class _Anonymous(RecommendationCheck):  # pragma: no cover - class body only
            def evaluate(self, summary, settings, goals, context):
                return None


def test_check_metadata_is_declared():
    for _, check in registry.items():
        assert check.description
        assert check.version
        assert isinstance(check.priority, Priority)
