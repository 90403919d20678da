"""Apply an accepted recommendation to a settings snapshot."""
from __future__ import annotations

import logging
from dataclasses import replace

from .models import Recommendation, RecommendationType, TherapySettings

_SCHEDULED_TYPES = frozenset({RecommendationType.BASAL, RecommendationType.ICR, RecommendationType.ISF})


def apply_recommendation(recommendation: Recommendation, settings: TherapySettings) -> TherapySettings:
    """Return new settings with the recommended segment value replaced.

    Only segments whose start and end match the recommendation's time range
    exactly are changed. When nothing matches (the schedule was edited after
    the recommendation was generated) the settings come back unchanged.
    """

    if recommendation.type not in _SCHEDULED_TYPES:
        logging.info(f"Recommendation {recommendation.id} has type {recommendation.type.value!r}; nothing to apply")
        return settings

    time_range = recommendation.time_range
    bounds = time_range.bounds()
    if bounds is None:
        logging.info(
            f"Recommendation {recommendation.id} has an invalid time range "
            f"{time_range.start!r}-{time_range.end!r}; settings unchanged"
        )
        return settings

    segments = settings.segments_for(recommendation.type)
    updated = []
    matched = 0
    for segment in segments:
        if segment.spans(bounds):
            updated.append(replace(segment, value=recommendation.suggested_value))
            matched += 1
        else:
            updated.append(segment)

    if not matched:
        logging.info(
            f"Recommendation {recommendation.id} targets {time_range.start}-{time_range.end}, "
            f"which no longer exists in the {recommendation.type.value} schedule; settings unchanged"
        )
        return settings

    return settings.with_segments(recommendation.type, updated)


__all__ = ["apply_recommendation"]
