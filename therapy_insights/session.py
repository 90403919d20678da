"""Single-slot holder for the recommendation a user is currently reviewing."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from .applicator import apply_recommendation
from .engine import RecommendationEngine
from .models import (
    AnalysisContext,
    Goals,
    GlucoseSummary,
    Recommendation,
    RecommendationStatus,
    RecommendationType,
    TherapySettings,
)

SUMMARY_HISTORY_LIMIT = 20


class NoPendingRecommendationError(RuntimeError):
    """Raised when accepting or dismissing with nothing pending."""


class SessionState(str, Enum):
    EMPTY = "empty"
    PENDING = "pending"


class RecommendationSession:
    """Tracks settings, the current recommendation and what has been applied.

    At most one recommendation is pending. ``refresh`` fills the slot,
    ``accept`` applies the pending change and ``dismiss`` discards it; both
    leave the slot empty.
    """

    def __init__(
        self,
        settings: TherapySettings,
        goals: Goals,
        *,
        engine: RecommendationEngine | None = None,
        clock: Callable[[], datetime] | None = None,
        context: AnalysisContext | None = None,
    ) -> None:
        self.settings = settings
        self.goals = goals
        self._engine = engine or RecommendationEngine(clock=clock)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._context = context
        self._current: Optional[Recommendation] = None
        self._summaries: deque[GlucoseSummary] = deque(maxlen=SUMMARY_HISTORY_LIMIT)
        self.applied_history: list[Recommendation] = []
        self.dismissed_history: list[Recommendation] = []

    @property
    def state(self) -> SessionState:
        return SessionState.PENDING if self._current is not None else SessionState.EMPTY

    @property
    def current(self) -> Optional[Recommendation]:
        return self._current

    @property
    def summaries(self) -> list[GlucoseSummary]:
        """Recorded summaries, most recent first."""

        return list(self._summaries)

    def record_summary(self, summary: GlucoseSummary) -> None:
        self._summaries.appendleft(summary)

    def refresh(self, summary: GlucoseSummary, *, force: bool = False) -> Optional[Recommendation]:
        """Record ``summary`` and generate a recommendation if none is pending."""

        self.record_summary(summary)
        if self._current is not None and not force:
            return self._current
        self._current = self._engine.generate(summary, self.settings, self.goals, self._context)
        return self._current

    def accept(self) -> TherapySettings:
        """Apply the pending recommendation and return the new settings."""

        pending = self._require_pending()
        previous_value = self._previous_value(pending)
        self.settings = apply_recommendation(pending, self.settings)
        applied = replace(
            pending,
            status=RecommendationStatus.APPLIED,
            applied_at=self._clock(),
            previous_value=previous_value,
        )
        self.applied_history.insert(0, applied)
        self._current = None
        logging.info(f"Applied recommendation {applied.id} ({applied.type.value} {applied.time_range.label})")
        return self.settings

    def dismiss(self, recommendation_id: str) -> None:
        """Discard the pending recommendation when its id matches."""

        pending = self._require_pending()
        if pending.id != recommendation_id:
            logging.info(f"Ignoring dismissal of {recommendation_id}; pending recommendation is {pending.id}")
            return
        self.dismissed_history.insert(
            0,
            replace(pending, status=RecommendationStatus.DISMISSED, dismissed_at=self._clock()),
        )
        self._current = None

    def _require_pending(self) -> Recommendation:
        if self._current is None:
            raise NoPendingRecommendationError("No recommendation is pending")
        return self._current

    def _previous_value(self, recommendation: Recommendation) -> float:
        if recommendation.type is RecommendationType.TARGET:
            return recommendation.current_value
        bounds = recommendation.time_range.bounds()
        if bounds is None:
            return recommendation.current_value
        for segment in self.settings.segments_for(recommendation.type):
            if segment.spans(bounds):
                return segment.value
        return recommendation.current_value


__all__ = [
    "NoPendingRecommendationError",
    "RecommendationSession",
    "SUMMARY_HISTORY_LIMIT",
    "SessionState",
]
