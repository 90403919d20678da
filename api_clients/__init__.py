"""API clients and helpers for external services."""

from .conversion import (
    goals_from_payload,
    problem_period_to_payload,
    recommendation_from_payload,
    recommendation_to_payload,
    settings_from_payload,
    settings_to_payload,
    summary_from_payload,
)
from .report_client import ReportClient, fetch_glucose_summary, get_glucose_summary
from .report_service_client import ReportServiceClient

__all__ = [
    "ReportClient",
    "ReportServiceClient",
    "fetch_glucose_summary",
    "get_glucose_summary",
    "goals_from_payload",
    "problem_period_to_payload",
    "recommendation_from_payload",
    "recommendation_to_payload",
    "settings_from_payload",
    "settings_to_payload",
    "summary_from_payload",
]
