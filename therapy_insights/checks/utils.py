"""Shared utilities for recommendation check implementations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class MealWindow:
    name: str
    hours: tuple[int, ...]
    icr_index: int

    @property
    def title(self) -> str:
        return self.name.capitalize()


MEAL_WINDOWS: Final[tuple[MealWindow, ...]] = (
    MealWindow("breakfast", (7, 8, 9, 10), 0),
    MealWindow("lunch", (12, 13, 14), 1),
    MealWindow("dinner", (18, 19, 20, 21), 2),
)

MEAL_HOURS: Final[frozenset[int]] = frozenset(
    hour for window in MEAL_WINDOWS for hour in window.hours
)

OVERNIGHT_HOURS: Final[tuple[int, ...]] = (23, 0, 1, 2, 3, 4, 5)
EARLY_MORNING_HOURS: Final[tuple[int, ...]] = (3, 4, 5, 6)
LATE_NIGHT_HOURS: Final[tuple[int, ...]] = (0, 1, 2)


def is_meal_hour(hour: int) -> bool:
    return hour in MEAL_HOURS
