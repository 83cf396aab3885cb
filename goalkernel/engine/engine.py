"""Engine facade — validate once, then filter → calculate → project → classify → recommend.

Everything after validate_goal() is total: no activities, zero elapsed time
and passed deadlines are ordinary branches, not exceptions.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from goalkernel.config import settings
from goalkernel.engine import calculators, classifier, filters, projection, quality, recommender
from goalkernel.engine.errors import ValidationError
from goalkernel.engine.models import (
    EXPECTED_UNITS,
    TERMINAL_STATUSES,
    ActivityRecord,
    Goal,
    GoalStatus,
    GoalType,
    GoalUpdate,
    ProgressAnalysis,
)

logger = logging.getLogger(__name__)


def validate_goal(goal: Goal) -> None:
    """Raise ValidationError listing every problem with the goal's configuration."""
    errors: list[str] = []

    expected = EXPECTED_UNITS[goal.type]
    if goal.unit != expected:
        errors.append(f"{goal.type.value} goals must use {expected.value} as unit, got {goal.unit.value}")

    if goal.target_value <= 0:
        errors.append("Target value must be greater than 0")

    if goal.type in (GoalType.pace, GoalType.race):
        if goal.race_distance is None:
            errors.append(f"{goal.type.value} goals must specify race_distance")
        elif goal.race_distance <= 0:
            errors.append("race_distance must be greater than 0")

    if goal.type is GoalType.frequency and not goal.race_type:
        errors.append("frequency goals must specify race_type")

    if goal.target_date <= filters.as_utc(goal.created_at).date():
        errors.append("Target date must be after creation date")

    if errors:
        raise ValidationError(goal.id, errors)


def activity_window(goal: Goal, as_of: date) -> tuple[date, date]:
    """Inclusive day range of activities `analyze` reads for `goal` on `as_of`.

    Covers the goal window and the volume-trend history, which may start before
    the goal was created. Fetching exactly this range gives the same analysis
    whichever caller loads the snapshot.
    """
    end = filters.window_end(goal, as_of)
    trend_start = end - timedelta(days=projection.trend_history_days() - 1)
    return min(filters.as_utc(goal.created_at).date(), trend_start), end


def analyze(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressAnalysis:
    """Compute a ProgressAnalysis for one goal from an activity snapshot.

    Deterministic: the only notion of "now" is `as_of`.
    """
    validate_goal(goal)

    selected = filters.select(goal, activities, as_of)
    result = calculators.calculate(goal, selected, as_of)

    created = filters.as_utc(goal.created_at).date()
    days_remaining = max(0, (goal.target_date - as_of).days)
    days_elapsed = max(0, (filters.window_end(goal, as_of) - created).days)

    projected = projection.project(result.series, goal.target_date, goal.type)
    status, severity = classifier.classify(result.progress_percentage, projected, days_remaining)

    valid = quality.filter_valid(activities) if settings.quality_filter_enabled else activities
    trend = projection.volume_trend(valid, filters.window_end(goal, as_of))

    analysis = ProgressAnalysis(
        goal_id=goal.id,
        goal_type=goal.type,
        as_of=as_of,
        current_value=result.current_value,
        target_value=goal.target_value,
        progress_percentage=result.progress_percentage,
        projected_completion_percentage=projected,
        projected_completion_date=projection.projected_completion_date(result.series, goal),
        days_remaining=days_remaining,
        days_elapsed=days_elapsed,
        status=status,
        severity=severity,
        trend=trend,
        course_correction_needed=classifier.course_correction_needed(status),
        series=result.series,
    )
    analysis.recommendations = recommender.recommend(goal, analysis)

    logger.debug(
        "Analyzed goal %s (%s): %d/%d activities, progress=%.1f%% projected=%.1f%% status=%s severity=%s",
        goal.id,
        goal.type.value,
        len(selected),
        len(activities),
        result.progress_percentage,
        projected,
        status.value,
        severity.value,
    )
    return analysis


def derive_goal_update(goal: Goal, analysis: ProgressAnalysis) -> GoalUpdate:
    """Cached value + lifecycle status to hand to the storage writer."""
    status = goal.status
    if analysis.progress_percentage >= 100.0:
        status = GoalStatus.completed
    elif analysis.days_remaining == 0:
        status = GoalStatus.failed
    return GoalUpdate(
        goal_id=goal.id,
        current_value=analysis.current_value,
        status=status,
        analyzed_at=analysis.as_of,
    )


def analyze_many(
    goals: list[Goal],
    activities: list[ActivityRecord],
    as_of: date,
) -> dict[str, ProgressAnalysis | ValidationError]:
    """Analyze each non-terminal goal independently.

    A misconfigured goal yields its ValidationError in place of an analysis
    instead of aborting the batch.
    """
    results: dict[str, ProgressAnalysis | ValidationError] = {}
    for goal in goals:
        if goal.status in TERMINAL_STATUSES:
            logger.debug("Skipping goal %s in terminal status %s", goal.id, goal.status.value)
            continue
        try:
            results[goal.id] = analyze(goal, activities, as_of)
        except ValidationError as exc:
            logger.warning("Goal %s has an invalid configuration: %s", goal.id, "; ".join(exc.errors))
            results[goal.id] = exc
    return results
