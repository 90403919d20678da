"""Priority dispatch over registered recommendation checks."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from . import checks as _checks  # noqa: F401 - ensure check registration side-effects
from .check_base import RecommendationCheck
from .models import AnalysisContext, Goals, GlucoseSummary, Recommendation, TherapySettings
from .registry import CheckRegistry, registry as default_registry


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationEngine:
    """Runs every check, then keeps the single highest-priority candidate.

    Checks run in their declared order; the candidates are then stably sorted
    by priority, so among equal priorities the earlier check wins.
    """

    def __init__(
        self,
        registry: CheckRegistry | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        default_thresholds: Mapping[str, Any] | None = None,
        default_check_settings: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        self._clock = clock or _utc_now
        self._default_thresholds = default_thresholds or {}
        self._default_check_settings = default_check_settings or {}

    def candidates(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext | None = None,
        *,
        predicate: Callable[[RecommendationCheck], bool] | None = None,
    ) -> list[Recommendation]:
        """Every non-null candidate, in check order."""

        resolved = self._build_context(context)
        return self._registry.evaluate_all(summary, settings, goals, resolved, predicate=predicate)

    def generate(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext | None = None,
        *,
        predicate: Callable[[RecommendationCheck], bool] | None = None,
    ) -> Optional[Recommendation]:
        found = self.candidates(summary, settings, goals, context, predicate=predicate)
        if not found:
            logging.debug("No recommendation checks produced a candidate")
            return None
        ranked = sorted(found, key=lambda candidate: candidate.priority.rank)
        selected = ranked[0]
        logging.info(
            f"Selected {selected.source_check} recommendation ({selected.priority.value} priority) "
            f"from {len(found)} candidate(s)"
        )
        return selected

    def _build_context(self, context: AnalysisContext | None) -> AnalysisContext:
        if context is None:
            context = AnalysisContext(
                thresholds=self._default_thresholds,
                check_settings=self._default_check_settings,
            )
        if context.analysis_time is None:
            context = replace(context, analysis_time=self._clock())
        return context


_engine: RecommendationEngine | None = None


def _get_engine() -> RecommendationEngine:
    global _engine
    if _engine is None:
        _engine = RecommendationEngine()
    return _engine


def generate_recommendation(
    summary: GlucoseSummary,
    settings: TherapySettings,
    goals: Goals,
    context: AnalysisContext | None = None,
) -> Optional[Recommendation]:
    """Return the single most important recommendation, or ``None``."""

    return _get_engine().generate(summary, settings, goals, context)


__all__ = ["RecommendationEngine", "generate_recommendation"]
