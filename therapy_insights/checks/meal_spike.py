"""Strengthen the carb ratio for the first meal with sustained post-meal highs."""
from __future__ import annotations

from typing import Optional

from ..check_base import RecommendationCheck
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
from ..features import percent_change, round_half_up, round_whole
from .utils import MEAL_WINDOWS


@register_check
class MealSpikeCheck(RecommendationCheck):
    id = "meal_spike"
    order = 3
    priority = Priority.MEDIUM
    recommendation_type = RecommendationType.ICR
    description = "Post-meal mean >30 mg/dL above target with TIR <50%; strengthen ICR 5% (floor 1:3)"
    version = "1.0.0"

    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        high_margin = float(self.resolved_threshold(context, "meal_high_margin", 30.0))
        tir_threshold = float(self.resolved_threshold(context, "meal_tir_threshold", 50.0))
        strengthen_factor = float(self.resolved_threshold(context, "icr_strengthen_factor", 0.95))
        ratio_floor = float(self.resolved_threshold(context, "icr_safety_floor", 3.0))

        segments = settings.icr_segments
        for meal in MEAL_WINDOWS:
            stats = summary.window(meal.hours)
            if stats.empty:
                continue
            if not (
                stats.average_glucose > goals.target_range_high + high_margin
                and stats.time_in_range < tir_threshold
            ):
                continue
            if not segments:
                continue

            segment = segments[min(meal.icr_index, len(segments) - 1)]
            suggested_ratio = round_half_up(segment.value * strengthen_factor, 1)
            if suggested_ratio < ratio_floor:
                continue

            return self.build_recommendation(
                context,
                segment=segment,
                suggested_value=suggested_ratio,
                change_percent=percent_change(strengthen_factor),
                label=f"{meal.title} time",
                title=f"Adjust {meal.title} Carb Ratio",
                rationale=(
                    f"Post-{meal.name} glucose is averaging {round_whole(stats.average_glucose)} mg/dL with only "
                    f"{round_whole(stats.time_in_range)}% in range. "
                    f"A slightly stronger carb ratio (1:{segment.value:g} → 1:{suggested_ratio:g}) may help "
                    f"cover {meal.name} carbs more effectively."
                ),
                supporting_data=SupportingData(
                    average_glucose=round_whole(stats.average_glucose),
                    time_in_range=round_whole(stats.time_in_range),
                    high_events=summary.events.high_events,
                ),
            )

        return None
