"""Command-line utility for analysing a CGM report summary against pump settings.

Input files are JSON in the same camelCase shape the report service returns::

    python -m therapy_insights.run_analysis summary.json \\
        --settings settings.json --goals goals.json --apply

Settings and goals default to the built-in starting values. Results are
written as JSON to stdout or to ``--output`` if provided.
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from api_clients.conversion import (
    goals_from_payload,
    problem_period_to_payload,
    recommendation_to_payload,
    settings_from_payload,
    settings_to_payload,
    summary_from_payload,
)
from models.therapy_models import GlucoseSummaryPayload, GoalsPayload, TherapySettingsPayload

from .applicator import apply_recommendation
from .defaults import DEFAULT_GOALS, DEFAULT_THERAPY_SETTINGS
from .engine import RecommendationEngine
from .models import AnalysisContext, Goals, GlucoseSummary, TherapySettings
from .problem_periods import identify_problem_periods


def _read_json(path: Path) -> Any:
    with path.open() as handle:
        return json.load(handle)


def load_summary(path: Path) -> GlucoseSummary:
    return summary_from_payload(GlucoseSummaryPayload(**_read_json(path)))


def load_settings(path: Path | None) -> TherapySettings:
    if path is None:
        return DEFAULT_THERAPY_SETTINGS
    return settings_from_payload(TherapySettingsPayload(**_read_json(path)))


def load_goals(path: Path | None) -> Goals:
    if path is None:
        return DEFAULT_GOALS
    return goals_from_payload(GoalsPayload(**_read_json(path)))


def load_context(path: Path | None) -> AnalysisContext | None:
    if path is None:
        return None
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise ValueError(f"Threshold file {path} must contain a JSON object")
    return AnalysisContext(
        thresholds=raw.get("thresholds", {}),
        check_settings=raw.get("check_settings", {}),
    )


def run(
    summary: GlucoseSummary,
    settings: TherapySettings,
    goals: Goals,
    *,
    context: AnalysisContext | None = None,
    apply: bool = False,
    engine: RecommendationEngine | None = None,
) -> dict[str, Any]:
    engine = engine or RecommendationEngine()
    problems = identify_problem_periods(summary, goals)
    recommendation = engine.generate(summary, settings, goals, context)

    result_settings = settings
    if apply and recommendation is not None:
        result_settings = apply_recommendation(recommendation, settings)

    return {
        "problemPeriods": [problem_period_to_payload(problem).model_dump(mode="json") for problem in problems],
        "recommendation": (
            recommendation_to_payload(recommendation).model_dump(mode="json", exclude_none=True)
            if recommendation is not None
            else None
        ),
        "applied": bool(apply and recommendation is not None),
        "settings": settings_to_payload(result_settings).model_dump(mode="json", exclude_none=True),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Identify problem periods and recommend one settings change")
    parser.add_argument("summary", type=Path, help="JSON file containing the CGM report summary")
    parser.add_argument("--settings", type=Path, help="JSON file containing pump settings (optional)")
    parser.add_argument("--goals", type=Path, help="JSON file containing glucose goals (optional)")
    parser.add_argument(
        "--thresholds",
        type=Path,
        help="JSON file with 'thresholds' and per-check 'check_settings' overrides (optional)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Return settings with the recommendation applied.",
    )
    parser.add_argument("--output", type=Path, help="Optional path to write JSON output")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s")

    results = run(
        load_summary(args.summary),
        load_settings(args.settings),
        load_goals(args.goals),
        context=load_context(args.thresholds),
        apply=args.apply,
    )

    if args.output:
        args.output.write_text(json.dumps(results, indent=2))
    else:
        print(json.dumps(results, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
