"""Strengthen the correction factor when variability is high and the mean stays above target."""
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
from ..features import percent_change, round_whole


@register_check
class CorrectionFactorCheck(RecommendationCheck):
    id = "correction_factor"
    order = 5
    priority = Priority.LOW
    recommendation_type = RecommendationType.ISF
    description = "CV >36% with mean above target; strengthen first ISF segment 5% (floor 15 mg/dL/U)"
    version = "1.0.0"

    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        cv_threshold = float(self.resolved_threshold(context, "cv_threshold", 36.0))
        strengthen_factor = float(self.resolved_threshold(context, "isf_strengthen_factor", 0.95))
        factor_floor = float(self.resolved_threshold(context, "isf_safety_floor", 15.0))

        stats = summary.statistics
        if stats.coefficient_of_variation <= cv_threshold:
            return None
        if stats.average_glucose <= goals.target_range_high:
            return None
        if not settings.isf_segments:
            return None

        # First segment stands in for the whole schedule.
        segment = settings.isf_segments[0]
        suggested_factor = round_whole(segment.value * strengthen_factor)
        if suggested_factor < factor_floor:
            return None

        return self.build_recommendation(
            context,
            segment=segment,
            suggested_value=float(suggested_factor),
            change_percent=percent_change(strengthen_factor),
            title="Strengthen Correction Factor",
            rationale=(
                f"Your glucose variability is high (CV: {round_whole(stats.coefficient_of_variation)}%) and "
                "corrections may not be bringing glucose down enough. "
                f"Adjusting ISF from {segment.value:g} to {suggested_factor} mg/dL per unit may make "
                "corrections more effective."
            ),
            supporting_data=SupportingData(average_glucose=round_whole(stats.average_glucose)),
        )
