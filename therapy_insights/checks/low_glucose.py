"""Reduce basal where lows cluster once time below range exceeds the goal."""
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


@register_check
class LowGlucoseCheck(RecommendationCheck):
    id = "low_glucose"
    order = 1
    priority = Priority.HIGH
    recommendation_type = RecommendationType.BASAL
    description = "Time below range above goal; decrease basal 5% for the lowest hour"
    version = "1.0.0"

    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        low_average_threshold = float(self.resolved_threshold(context, "low_average_threshold", 80.0))
        low_p25_threshold = float(self.resolved_threshold(context, "low_percentile_25_threshold", 70.0))
        decrease_factor = float(self.resolved_threshold(context, "basal_decrease_factor", 0.95))

        total_low = summary.time_in_range.total_low
        if total_low <= goals.max_low_percentage:
            return None

        low_hours = sorted(
            (
                pattern
                for pattern in summary.hourly_patterns
                if pattern.average_glucose < low_average_threshold
                or pattern.percentile_25 < low_p25_threshold
            ),
            key=lambda pattern: pattern.average_glucose,
        )
        if not low_hours or not settings.basal_segments:
            return None

        worst = low_hours[0]
        segment = resolve_segment(settings.basal_segments, worst.hour)
        suggested_rate = round_half_up(segment.value * decrease_factor, 2)
        change = percent_change(decrease_factor)
        label = time_range_label(segment.start, segment.end)

        return self.build_recommendation(
            context,
            segment=segment,
            suggested_value=suggested_rate,
            change_percent=change,
            label=label,
            title="Reduce Basal to Prevent Lows",
            rationale=(
                f"You're experiencing {total_low:g}% time below range (goal: <{goals.max_low_percentage:g}%). "
                f"The {label} period shows glucose averaging around {round_whole(worst.average_glucose)} mg/dL. "
                f"A small {abs(change)}% basal reduction from {segment.value:g} to {suggested_rate:g} U/hr "
                "may help prevent lows while keeping you safe."
            ),
            supporting_data=SupportingData(
                average_glucose=round_whole(worst.average_glucose),
                time_in_range=round_whole(worst.time_in_range),
                low_events=summary.events.low_events,
            ),
        )
