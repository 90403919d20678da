"""Registry for discovering and executing recommendation checks."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Dict, Type

from .check_base import RecommendationCheck
from .models import AnalysisContext, Goals, GlucoseSummary, Recommendation, TherapySettings


class CheckRegistry:
    """Keeps track of available checks by id."""

    def __init__(self) -> None:
        self._checks: Dict[str, RecommendationCheck] = {}

    def register(self, check_cls: Type[RecommendationCheck]) -> Type[RecommendationCheck]:
        if check_cls.id in self._checks:
            raise ValueError(f"Check '{check_cls.id}' already registered")
        self._checks[check_cls.id] = check_cls()
        return check_cls

    def clear(self) -> None:
        """Remove all registered checks."""

        self._checks.clear()

    def get(self, check_id: str) -> RecommendationCheck:
        return self._checks[check_id]

    def items(self) -> Iterable[tuple[str, RecommendationCheck]]:
        return [(check.id, check) for check in self.values()]

    def values(self) -> Iterable[RecommendationCheck]:
        """Checks in evaluation order; registration order breaks ties."""

        return sorted(self._checks.values(), key=lambda check: check.order)

    def evaluate_all(
        self,
        summary: GlucoseSummary,
        settings: TherapySettings,
        goals: Goals,
        context: AnalysisContext,
        predicate: Callable[[RecommendationCheck], bool] | None = None,
    ) -> list[Recommendation]:
        """Run every registered check in order, optionally filtering."""

        candidates: list[Recommendation] = []
        for check in self.values():
            if predicate is not None and not predicate(check):
                continue
            candidate = check.evaluate(summary, settings, goals, context)
            if candidate is None:
                continue
            logging.debug(
                f"Check {check.id} proposed {candidate.type.value} change "
                f"{candidate.current_value} -> {candidate.suggested_value} ({candidate.priority.value})"
            )
            candidates.append(candidate)
        return candidates


registry = CheckRegistry()


def register_check(check_cls: Type[RecommendationCheck]) -> Type[RecommendationCheck]:
    """Decorator for registering a check at definition time."""

    return registry.register(check_cls)


def clear_registry() -> None:
    """Remove all check registrations."""

    registry.clear()
