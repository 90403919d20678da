"""Identify time-of-day blocks whose hourly patterns need attention."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional, Sequence

from .features import round_whole
from .clock import format_hour_range
from .models import (
    Goals,
    GlucoseSummary,
    ProblemPeriod,
    ProblemType,
    RecommendationType,
    Severity,
    TherapySettings,
    TimeSegment,
)
from .segments import resolve_segment


@dataclass(frozen=True)
class TimeBlock:
    name: str
    start_hour: int
    end_hour: int

    @property
    def hours(self) -> range:
        return range(self.start_hour, self.end_hour)


TIME_BLOCKS: Final[tuple[TimeBlock, ...]] = (
    TimeBlock("Overnight", 0, 6),
    TimeBlock("Dawn/Morning", 3, 8),
    TimeBlock("Post-breakfast", 7, 11),
    TimeBlock("Midday", 11, 14),
    TimeBlock("Afternoon", 14, 18),
    TimeBlock("Post-dinner", 18, 22),
    TimeBlock("Evening", 21, 24),
)

MAX_PROBLEM_PERIODS: Final[int] = 4

LOW_GLUCOSE_THRESHOLD: Final[float] = 80.0
SEVERE_LOW_THRESHOLD: Final[float] = 70.0
HIGH_MARGIN: Final[float] = 20.0
SEVERE_HIGH_THRESHOLD: Final[float] = 220.0
MODERATE_HIGH_THRESHOLD: Final[float] = 200.0
VARIABLE_TIR_THRESHOLD: Final[float] = 50.0
MODERATE_VARIABLE_TIR_THRESHOLD: Final[float] = 40.0


def _classify(block: TimeBlock, average_glucose: float, time_in_range: float, goals: Goals) -> Optional[ProblemPeriod]:
    if average_glucose < LOW_GLUCOSE_THRESHOLD:
        severity = Severity.SEVERE if average_glucose < SEVERE_LOW_THRESHOLD else Severity.MODERATE
        return ProblemPeriod(
            start_hour=block.start_hour,
            end_hour=block.end_hour,
            type=ProblemType.LOW,
            severity=severity,
            average_glucose=average_glucose,
            time_in_range=time_in_range,
            description=f"{block.name}: Glucose running low.",
        )
    if average_glucose > goals.target_range_high + HIGH_MARGIN:
        if average_glucose > SEVERE_HIGH_THRESHOLD:
            severity = Severity.SEVERE
        elif average_glucose > MODERATE_HIGH_THRESHOLD:
            severity = Severity.MODERATE
        else:
            severity = Severity.MILD
        return ProblemPeriod(
            start_hour=block.start_hour,
            end_hour=block.end_hour,
            type=ProblemType.HIGH,
            severity=severity,
            average_glucose=average_glucose,
            time_in_range=time_in_range,
            description=f"{block.name}: Glucose consistently elevated.",
        )
    if time_in_range < VARIABLE_TIR_THRESHOLD:
        severity = Severity.MODERATE if time_in_range < MODERATE_VARIABLE_TIR_THRESHOLD else Severity.MILD
        return ProblemPeriod(
            start_hour=block.start_hour,
            end_hour=block.end_hour,
            type=ProblemType.VARIABLE,
            severity=severity,
            average_glucose=average_glucose,
            time_in_range=time_in_range,
            description=f"{block.name}: High variability.",
        )
    return None


def identify_problem_periods(summary: GlucoseSummary, goals: Goals) -> list[ProblemPeriod]:
    """Classify each time block and return the most urgent problems first.

    Each block yields at most one problem: lows win over highs, which win over
    poor time in range. Results are ordered by severity, then by type (lows,
    variability, highs), and truncated to four entries.
    """

    problems: list[ProblemPeriod] = []
    for block in TIME_BLOCKS:
        stats = summary.window(block.hours)
        if stats.empty:
            continue
        problem = _classify(block, stats.average_glucose, stats.time_in_range, goals)
        if problem is not None:
            problems.append(problem)

    problems.sort(key=lambda problem: (problem.severity.rank, problem.type.rank))
    return problems[:MAX_PROBLEM_PERIODS]


@dataclass(frozen=True)
class ProblemGuidance:
    """Plain-language explanation of a problem period and what to review."""

    headline: str
    explanation: str
    setting_type: RecommendationType
    recommendation: str
    current_setting: Optional[str] = None


def time_block_label(start_hour: int, end_hour: int) -> str:
    if start_hour >= 0 and end_hour <= 6:
        return "Overnight"
    if start_hour >= 3 and end_hour <= 8:
        return "Early morning"
    if start_hour >= 6 and end_hour <= 11:
        return "Morning"
    if start_hour >= 11 and end_hour <= 14:
        return "Midday"
    if start_hour >= 14 and end_hour <= 18:
        return "Afternoon"
    if start_hour >= 17 and end_hour <= 22:
        return "Evening"
    if start_hour >= 21 or end_hour <= 3:
        return "Night"
    return "This period"


def _segment_at(segments: Sequence[TimeSegment], hour: int) -> Optional[TimeSegment]:
    if not segments:
        return None
    return resolve_segment(segments, hour)


def _fmt(value: float) -> str:
    return f"{value:g}"


def guidance_for(problem: ProblemPeriod, settings: TherapySettings) -> ProblemGuidance:
    """Describe which setting most likely drives ``problem``."""

    label = time_block_label(problem.start_hour, problem.end_hour)
    hour_range = format_hour_range(problem.start_hour, problem.end_hour)
    average = round_whole(problem.average_glucose)
    start = problem.start_hour

    basal = _segment_at(settings.basal_segments, start)
    icr = _segment_at(settings.icr_segments, start)
    isf = _segment_at(settings.isf_segments, start)
    basal_setting = f"{_fmt(basal.value)} U/hr" if basal else None
    icr_setting = f"1:{_fmt(icr.value)}" if icr else None

    if problem.type is ProblemType.LOW:
        if 0 <= start < 6:
            return ProblemGuidance(
                headline="Overnight lows are occurring",
                explanation=(
                    "Your glucose is dropping too low during the night. This is a safety concern that "
                    f"should be addressed first. The average of {average} mg/dL suggests your overnight "
                    "insulin delivery may be too aggressive."
                ),
                setting_type=RecommendationType.BASAL,
                recommendation=f"Reduce overnight basal rate by 5-10% ({hour_range})",
                current_setting=basal_setting,
            )
        if 6 <= start < 11:
            return ProblemGuidance(
                headline="Morning lows after breakfast bolus",
                explanation=(
                    "You're experiencing low glucose in the morning hours. This could be from too "
                    "aggressive breakfast carb ratios or morning basal rates."
                ),
                setting_type=RecommendationType.ICR,
                recommendation="Consider weakening breakfast carb ratio (higher number = less insulin per carb)",
                current_setting=icr_setting,
            )
        if 11 <= start < 15:
            return ProblemGuidance(
                headline="Midday lows occurring",
                explanation=(
                    "Glucose is dropping low around lunchtime. This may be from lunch boluses being "
                    "too large or afternoon basal being too high."
                ),
                setting_type=RecommendationType.ICR,
                recommendation="Consider weakening lunch carb ratio or reducing early afternoon basal",
                current_setting=icr_setting,
            )
        return ProblemGuidance(
            headline=f"{label} lows need attention",
            explanation=(
                f"Your glucose is running low during this period with an average of {average} mg/dL. "
                "Safety is the priority - reducing lows comes before fixing highs."
            ),
            setting_type=RecommendationType.BASAL,
            recommendation="Reduce basal rate for this time period by 5-10%",
            current_setting=basal_setting,
        )

    if problem.type is ProblemType.HIGH:
        current_ratio = icr.value if icr else 10
        if 3 <= start < 8:
            return ProblemGuidance(
                headline="Dawn phenomenon causing morning highs",
                explanation=(
                    "Your glucose rises significantly in the early morning hours (dawn phenomenon). "
                    "This is caused by natural hormone changes and is very common."
                ),
                setting_type=RecommendationType.BASAL,
                recommendation="Increase basal rate starting around 3-4am by 5-10% to counteract the dawn rise",
                current_setting=basal_setting,
            )
        if 7 <= start < 11:
            return ProblemGuidance(
                headline="Post-breakfast spikes are too high",
                explanation=(
                    f"Glucose is spiking after breakfast with an average of {average} mg/dL. Breakfast "
                    "is typically the hardest meal to cover due to morning insulin resistance."
                ),
                setting_type=RecommendationType.ICR,
                recommendation=(
                    "Strengthen breakfast carb ratio (lower number = more insulin per carb). "
                    f"Try 1:{_fmt(max(4, current_ratio - 1))}"
                ),
                current_setting=icr_setting,
            )
        if 11 <= start < 15:
            return ProblemGuidance(
                headline="Post-lunch glucose running high",
                explanation=(
                    f"Glucose elevates after lunch averaging {average} mg/dL. Your lunch carb ratio "
                    "may need strengthening."
                ),
                setting_type=RecommendationType.ICR,
                recommendation=f"Strengthen lunch carb ratio (lower number). Consider 1:{_fmt(max(5, current_ratio - 1))}",
                current_setting=icr_setting,
            )
        if 17 <= start < 22:
            return ProblemGuidance(
                headline="Dinner and evening glucose too high",
                explanation=(
                    f"Evening glucose is elevated with an average of {average} mg/dL. This could be "
                    "from dinner bolusing or evening basal rates."
                ),
                setting_type=RecommendationType.ICR,
                recommendation="Strengthen dinner carb ratio or increase evening basal rate by 5%",
                current_setting=icr_setting,
            )
        if start >= 22 or start < 3:
            return ProblemGuidance(
                headline="Overnight glucose staying elevated",
                explanation=(
                    f"Glucose remains high through the night averaging {average} mg/dL. This often "
                    "indicates overnight basal is too low."
                ),
                setting_type=RecommendationType.BASAL,
                recommendation="Increase overnight basal rate by 5-10%",
                current_setting=basal_setting,
            )
        return ProblemGuidance(
            headline=f"{label} glucose running high",
            explanation=(
                f"Your glucose averages {average} mg/dL during this period with only "
                f"{round_whole(problem.time_in_range)}% in range."
            ),
            setting_type=RecommendationType.BASAL,
            recommendation="Consider increasing basal rate for this period by 5%",
            current_setting=basal_setting,
        )

    return ProblemGuidance(
        headline=f"{label} showing unpredictable swings",
        explanation=(
            "Your glucose is swinging between highs and lows during this period. This may indicate "
            "correction doses are over- or under-shooting."
        ),
        setting_type=RecommendationType.ISF,
        recommendation="Review correction factor (ISF) - you may need to adjust how aggressively corrections work",
        current_setting=f"{_fmt(isf.value)} mg/dL per unit" if isf else None,
    )


__all__ = [
    "MAX_PROBLEM_PERIODS",
    "TIME_BLOCKS",
    "ProblemGuidance",
    "TimeBlock",
    "guidance_for",
    "identify_problem_periods",
    "time_block_label",
]
