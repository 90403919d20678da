"""Raise basal for the worst high hour outside meal windows."""
from __future__ import annotations

from typing import Optional

from ..check_base import RecommendationCheck
from ..clock import time_range_label
from ..models import (
    AnalysisContext,
    Goals,
    GlucoseSummary,
    Priority,
    Recommendation,
    RecommendationType,
    SupportingData,
    TherapySettings,
)
from ..registry import register_check
from ..segments import resolve_segment
from ..features import percent_change, round_half_up, round_whole
from .utils import is_meal_hour


@register_check
class GeneralHighCheck(RecommendationCheck):
    id = "general_high"
    order = 4
    priority = Priority.LOW
    recommendation_type = RecommendationType.BASAL
    description = "TIR below goal with ≥25% above range; increase basal 5% for the worst non-meal hour"
    version = "1.0.0"

    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        time_above_threshold = float(self.resolved_threshold(context, "time_above_range_threshold", 25.0))
        high_margin = float(self.resolved_threshold(context, "hour_high_margin", 20.0))
        increase_factor = float(self.resolved_threshold(context, "basal_increase_factor", 1.05))

        tir = summary.time_in_range
        if tir.in_range >= goals.target_tir:
            return None
        total_high = tir.total_high
        if total_high < time_above_threshold:
            return None

        high_hours = sorted(
            (
                pattern
                for pattern in summary.hourly_patterns
                if pattern.average_glucose > goals.target_range_high + high_margin
                and not is_meal_hour(pattern.hour)
            ),
            key=lambda pattern: pattern.average_glucose,
            reverse=True,
        )
        if not high_hours or not settings.basal_segments:
            return None

        worst = high_hours[0]
        segment = resolve_segment(settings.basal_segments, worst.hour)
        suggested_rate = round_half_up(segment.value * increase_factor, 2)
        change = percent_change(increase_factor)
        label = time_range_label(segment.start, segment.end)

        return self.build_recommendation(
            context,
            segment=segment,
            suggested_value=suggested_rate,
            change_percent=change,
            label=label,
            title="Reduce High Glucose Patterns",
            rationale=(
                f"You're spending {total_high:g}% time above range. "
                f"The {label} period averages {round_whole(worst.average_glucose)} mg/dL. "
                f"A {change}% basal increase from {segment.value:g} to {suggested_rate:g} U/hr "
                "may help improve time in range."
            ),
            supporting_data=SupportingData(
                average_glucose=round_whole(worst.average_glucose),
                time_in_range=round_whole(worst.time_in_range),
                high_events=summary.events.high_events,
            ),
        )
