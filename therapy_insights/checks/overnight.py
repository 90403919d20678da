"""Raise overnight basal for a dawn rise or persistently high nights."""
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
from ..segments import resolve_segment
from ..features import percent_change, round_half_up, round_whole
from .utils import EARLY_MORNING_HOURS, LATE_NIGHT_HOURS, OVERNIGHT_HOURS


@register_check
class OvernightCheck(RecommendationCheck):
    id = "overnight"
    order = 2
    priority = Priority.MEDIUM
    recommendation_type = RecommendationType.BASAL
    description = (
        "03:00-07:00 mean >30 mg/dL above 00:00-03:00 and above target, or 23:00-06:00 mean above "
        "target with TIR <60%; increase basal 5%"
    )
    version = "1.0.0"

    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        dawn_rise_threshold = float(self.resolved_threshold(context, "dawn_rise_threshold", 30.0))
        overnight_tir_threshold = float(self.resolved_threshold(context, "overnight_tir_threshold", 60.0))
        dawn_hour = int(self.resolved_threshold(context, "dawn_adjustment_hour", 4))
        overnight_hour = int(self.resolved_threshold(context, "overnight_adjustment_hour", 2))
        increase_factor = float(self.resolved_threshold(context, "basal_increase_factor", 1.05))

        overnight = summary.window(OVERNIGHT_HOURS)
        early_morning = summary.window(EARLY_MORNING_HOURS)
        late_night = summary.window(LATE_NIGHT_HOURS)
        dawn_rise = early_morning.average_glucose - late_night.average_glucose
        change = percent_change(increase_factor)

        if dawn_rise > dawn_rise_threshold and early_morning.average_glucose > goals.target_range_high:
            if not settings.basal_segments:
                return None
            segment = resolve_segment(settings.basal_segments, dawn_hour)
            suggested_rate = round_half_up(segment.value * increase_factor, 2)
            return self.build_recommendation(
                context,
                segment=segment,
                suggested_value=suggested_rate,
                change_percent=change,
                title="Address Dawn Phenomenon",
                rationale=(
                    f"Your glucose rises about {round_whole(dawn_rise)} mg/dL between 12am-3am and 3am-7am "
                    "(dawn phenomenon). "
                    f"Early morning average is {round_whole(early_morning.average_glucose)} mg/dL. "
                    f"A {change}% basal increase during this period from {segment.value:g} to "
                    f"{suggested_rate:g} U/hr may help flatten this rise."
                ),
                supporting_data=SupportingData(
                    average_glucose=round_whole(early_morning.average_glucose),
                    time_in_range=round_whole(overnight.time_in_range),
                ),
            )

        if (
            overnight.average_glucose > goals.target_range_high
            and overnight.time_in_range < overnight_tir_threshold
        ):
            if not settings.basal_segments:
                return None
            segment = resolve_segment(settings.basal_segments, overnight_hour)
            suggested_rate = round_half_up(segment.value * increase_factor, 2)
            return self.build_recommendation(
                context,
                segment=segment,
                suggested_value=suggested_rate,
                change_percent=change,
                title="Reduce Overnight Highs",
                rationale=(
                    f"Overnight glucose is averaging {round_whole(overnight.average_glucose)} mg/dL with only "
                    f"{round_whole(overnight.time_in_range)}% time in range. "
                    f"A modest {change}% increase in overnight basal from {segment.value:g} to "
                    f"{suggested_rate:g} U/hr may help bring these levels down."
                ),
                supporting_data=SupportingData(
                    average_glucose=round_whole(overnight.average_glucose),
                    time_in_range=round_whole(overnight.time_in_range),
                ),
            )

        return None
