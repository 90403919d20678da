"""Base class and utilities for recommendation checks."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from .clock import time_range_label
from .models import (
    AnalysisContext,
    Goals,
    GlucoseSummary,
    Priority,
    Recommendation,
    RecommendationType,
    SupportingData,
    TherapySettings,
    TimeRange,
    TimeSegment,
)


class RecommendationCheck(ABC):
    """Abstract therapy check producing at most one candidate recommendation."""

    id: str = ""
    order: int = 0
    priority: Priority = Priority.LOW
    recommendation_type: RecommendationType = RecommendationType.BASAL
    description: str = ""
    version: str = "1.0.0"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.id:
            raise ValueError(f"Check {cls.__name__} must define a non-empty id")

    @abstractmethod
    def evaluate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
    ) -> Optional[Recommendation]:
        """Return a candidate recommendation, or ``None`` when nothing applies."""

    def resolved_threshold(self, context: AnalysisContext, key: str, default: Any) -> Any:
        """Helper to fetch check-specific threshold overrides."""

        return context.check_threshold(self.id, key, default)

    def build_recommendation(
        self,
        context: AnalysisContext,
        *,
        segment: TimeSegment,
        suggested_value: float,
        change_percent: float,
        title: str,
        rationale: str,
        supporting_data: SupportingData,
        label: Optional[str] = None,
    ) -> Recommendation:
        """Stamp a candidate for ``segment`` with this check's type and priority."""

        generated_at = context.timestamp()
        return Recommendation(
            id=f"rec-{int(generated_at.timestamp() * 1000)}",
            type=self.recommendation_type,
            priority=self.priority,
            time_range=TimeRange(
                start=segment.start,
                end=segment.end,
                label=label or time_range_label(segment.start, segment.end),
            ),
            current_value=segment.value,
            suggested_value=suggested_value,
            change_percent=change_percent,
            title=title,
            rationale=rationale,
            supporting_data=supporting_data,
            generated_at=generated_at,
            source_check=self.id,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} id={self.id!r} priority={self.priority.value!r}>"
