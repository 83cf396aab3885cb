"""Correction recommender — rule table keyed by (goal type, severity).

Emits structured directives and numeric deltas only; phrasing them for a
human is the narration collaborator's job.
"""

from __future__ import annotations

import math
from typing import assert_never

from goalkernel.config import settings
from goalkernel.engine.classifier import ON_TRACK_THRESHOLD
from goalkernel.engine.filters import ANY_RACE, as_utc
from goalkernel.engine.models import (
    AdjustmentType,
    CourseCorrection,
    Goal,
    GoalType,
    HealthStatus,
    ProgressAnalysis,
    Severity,
    Trend,
)

DAILY_KM_SPLIT_THRESHOLD = 5.0
HIGH_WEEKLY_FREQUENCY = 4.0
LARGE_PACE_GAP = 1.2


def format_time(seconds: float) -> str:
    """H:MM:SS, or M:SS under an hour."""
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _ceil(value: float) -> int:
    # Round first so float noise (2.0000000001) does not add a whole unit.
    return math.ceil(round(value, 9))


def _original_days(goal: Goal) -> int:
    return (goal.target_date - as_utc(goal.created_at).date()).days


def _weeks(days: int) -> float:
    return max(days, 1) / 7.0


def _projected_gap(goal: Goal, analysis: ProgressAnalysis) -> float:
    """Shortfall at the deadline if the current trend holds, in goal units."""
    return goal.target_value * max(0.0, 100.0 - analysis.projected_completion_percentage) / 100.0


def _extension(days_needed: int, days_remaining: int, original_days: int) -> int | None:
    extra = min(days_needed - days_remaining, original_days)
    return extra if extra > 0 else None


def _volume_extension(goal: Goal, analysis: ProgressAnalysis) -> int | None:
    """Days to add when the remaining volume exceeds a capped weekly increase."""
    original = _original_days(goal)
    remaining_need = max(0.0, goal.target_value - analysis.current_value)
    if remaining_need == 0.0:
        return None

    current_weekly = analysis.current_value / _weeks(analysis.days_elapsed)
    capped_weekly = current_weekly * (1.0 + settings.max_weekly_increase)
    if capped_weekly <= 0.0:
        return original if original > 0 else None

    required_weekly = remaining_need / _weeks(analysis.days_remaining)
    if required_weekly <= capped_weekly:
        return None
    days_needed = _ceil(remaining_need / capped_weekly * 7.0)
    return _extension(days_needed, analysis.days_remaining, original)


def _pace_extension(goal: Goal, analysis: ProgressAnalysis) -> int | None:
    best = analysis.current_value
    if best <= 0.0 or best <= goal.target_value:
        return None
    improvement_needed = (best - goal.target_value) / best
    days_needed = _ceil(improvement_needed / settings.max_weekly_pace_improvement * 7.0)
    if days_needed <= analysis.days_remaining:
        return None
    return _extension(days_needed, analysis.days_remaining, _original_days(goal))


def _consistency_extension(goal: Goal, analysis: ProgressAnalysis) -> int | None:
    """Weeks to add so that every-week-active reaches the on-track band."""
    original = _original_days(goal)
    total_weeks = max(1, _ceil((original + 1) / 7.0))
    elapsed_weeks = max(1, _ceil((analysis.days_elapsed + 1) / 7.0))
    active = round(analysis.current_value * elapsed_weeks)
    remaining_weeks = max(0, total_weeks - elapsed_weeks)

    band = ON_TRACK_THRESHOLD / 100.0
    best_case = (active + remaining_weeks) / total_weeks
    if best_case >= band:
        return None
    extra_weeks = _ceil((band * total_weeks - active - remaining_weeks) / (1.0 - band))
    return _extension(extra_weeks * 7 + analysis.days_remaining, analysis.days_remaining, original)


def _trend_actions(analysis: ProgressAnalysis) -> list[str]:
    if analysis.trend is Trend.down:
        return ["Weekly volume is dropping: return to your earlier routine before adding more"]
    return []


def _deadline_passed_correction(
    analysis: ProgressAnalysis,
    adjustment_type: AdjustmentType,
    shortfall: str,
) -> CourseCorrection:
    # Past the deadline only the timeline fallback carries numbers.
    actions = [f"The target date has passed {shortfall} short: move it back to keep going"]
    actions.extend(_trend_actions(analysis))
    return CourseCorrection(
        severity=analysis.severity,
        adjustment_type=adjustment_type,
        specific_actions=actions,
    )


def _distance_correction(goal: Goal, analysis: ProgressAnalysis) -> CourseCorrection:
    remaining_km = max(0.0, goal.target_value - analysis.current_value) / 1000.0
    if analysis.days_remaining == 0:
        return _deadline_passed_correction(analysis, AdjustmentType.increase_distance, f"{remaining_km:.1f} km")

    weekly_delta = _projected_gap(goal, analysis) / _weeks(analysis.days_remaining)
    daily_km = remaining_km / max(analysis.days_remaining, 1)

    actions = [f"Add {weekly_delta / 1000.0:.1f} km to your weekly volume"]
    if daily_km > DAILY_KM_SPLIT_THRESHOLD:
        actions.append("Split long days into two shorter runs")
    actions.append("Extend one run per week into a long run")
    actions.extend(_trend_actions(analysis))

    return CourseCorrection(
        severity=analysis.severity,
        adjustment_type=AdjustmentType.increase_distance,
        specific_actions=actions,
        weekly_distance_delta=round(weekly_delta, 1),
    )


def _pace_correction(goal: Goal, analysis: ProgressAnalysis) -> CourseCorrection:
    race_km = (goal.race_distance or 0.0) / 1000.0
    best = analysis.current_value

    if best <= 0.0:
        return CourseCorrection(
            severity=analysis.severity,
            adjustment_type=AdjustmentType.improve_pace,
            specific_actions=[
                f"Run a {race_km:g} km time trial to set a baseline",
                "Add one interval session per week",
            ],
        )

    actions = [
        f"Close the gap from {format_time(best)} to {format_time(goal.target_value)}",
        "Add intervals: 4x800m at target pace with 2 min rest",
        "Add a weekly tempo run slightly slower than target pace",
    ]
    if best > goal.target_value * LARGE_PACE_GAP:
        actions.append("Prioritise speed work: the gap is over 20%")

    return CourseCorrection(
        severity=analysis.severity,
        adjustment_type=AdjustmentType.improve_pace,
        specific_actions=actions,
        target_pace_delta=round((goal.target_value - best) / race_km, 1),
    )


def _frequency_correction(goal: Goal, analysis: ProgressAnalysis) -> CourseCorrection:
    remaining = max(0.0, goal.target_value - analysis.current_value)
    if analysis.days_remaining == 0:
        return _deadline_passed_correction(
            analysis, AdjustmentType.increase_frequency, f"{_ceil(remaining)} activities"
        )

    weekly_delta = _projected_gap(goal, analysis) / _weeks(analysis.days_remaining)
    per_week = remaining / _weeks(analysis.days_remaining)

    actions = [f"Aim for {_ceil(per_week)} qualifying activities per week"]
    if goal.race_type and goal.race_type != ANY_RACE:
        actions.append(f"Register for upcoming {goal.race_type.replace('_', ' ')} events")
    elif goal.race_type == ANY_RACE:
        actions.append("Register for upcoming races")
    if per_week > HIGH_WEEKLY_FREQUENCY:
        actions.append("Keep extra sessions short and easy to avoid burnout")
    actions.extend(_trend_actions(analysis))

    return CourseCorrection(
        severity=analysis.severity,
        adjustment_type=AdjustmentType.increase_frequency,
        specific_actions=actions,
        weekly_frequency_delta=round(weekly_delta, 2),
    )


def _consistency_correction(goal: Goal, analysis: ProgressAnalysis) -> CourseCorrection:
    actions = [
        "Schedule at least one run every week",
        "Keep a short fallback run for busy weeks",
    ]
    actions.extend(_trend_actions(analysis))
    return CourseCorrection(
        severity=analysis.severity,
        adjustment_type=AdjustmentType.increase_frequency,
        specific_actions=actions,
    )


def _primary(goal: Goal, analysis: ProgressAnalysis) -> tuple[CourseCorrection, int | None]:
    """Primary correction plus the timeline extension in days, if one is needed."""
    match goal.type:
        case GoalType.distance:
            return _distance_correction(goal, analysis), _volume_extension(goal, analysis)
        case GoalType.pace | GoalType.race:
            return _pace_correction(goal, analysis), _pace_extension(goal, analysis)
        case GoalType.frequency:
            return _frequency_correction(goal, analysis), _volume_extension(goal, analysis)
        case GoalType.consistency:
            return _consistency_correction(goal, analysis), _consistency_extension(goal, analysis)
        case _:
            assert_never(goal.type)


def sort_corrections(corrections: list[CourseCorrection]) -> list[CourseCorrection]:
    """Severity descending, then adjustment type declaration order."""
    return sorted(corrections, key=lambda c: (-c.severity.rank, c.adjustment_type.rank))


def recommend(goal: Goal, analysis: ProgressAnalysis) -> list[CourseCorrection]:
    if analysis.status is not HealthStatus.behind:
        return []

    primary, extension_days = _primary(goal, analysis)
    corrections = [primary]

    if analysis.severity is Severity.major and extension_days is not None:
        corrections.append(
            CourseCorrection(
                severity=Severity.major,
                adjustment_type=AdjustmentType.adjust_timeline,
                specific_actions=[f"Move the target date back by {extension_days} days"],
                timeline_adjustment_days=extension_days,
            )
        )

    return sort_corrections(corrections)
