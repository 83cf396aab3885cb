"""Goal filter — picks the activities that count toward a goal."""

from __future__ import annotations

from datetime import date, datetime, timezone

from goalkernel.config import settings
from goalkernel.engine import quality
from goalkernel.engine.models import ActivityRecord, Goal, GoalType

ANY_RACE = "any"


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def window_end(goal: Goal, as_of: date) -> date:
    """Last day that counts toward the goal: min(target_date, as_of)."""
    return min(goal.target_date, as_of)


def within_distance_tolerance(distance: float, race_distance: float, tolerance: float) -> bool:
    return race_distance * (1.0 - tolerance) <= distance <= race_distance * (1.0 + tolerance)


def _is_flagged_race(activity: ActivityRecord) -> bool:
    """A race either by the explicit flag or by a race category."""
    return activity.is_race is True or bool(activity.race_category)


def _matches_goal(goal: Goal, activity: ActivityRecord) -> bool:
    if goal.type in (GoalType.pace, GoalType.race):
        # race_distance presence is guaranteed by validation.
        if not within_distance_tolerance(
            activity.distance, goal.race_distance or 0.0, settings.pace_distance_tolerance
        ):
            return False
        if goal.type is GoalType.race and not _is_flagged_race(activity):
            return False

    if goal.type is GoalType.frequency:
        if goal.race_type == ANY_RACE:
            return _is_flagged_race(activity)
        # Unclassified activities never match a specific category.
        if activity.race_category is None:
            return False
        return activity.race_category == goal.race_type

    return True


def select(goal: Goal, activities: list[ActivityRecord], as_of: date) -> list[ActivityRecord]:
    """Return qualifying activities for `goal`, ascending by start time.

    Window is [goal.created_at, min(goal.target_date, as_of)] inclusive of the
    whole last day. Input is never mutated.
    """
    start = as_utc(goal.created_at)
    last_day = window_end(goal, as_of)

    candidates = quality.filter_valid(activities) if settings.quality_filter_enabled else list(activities)

    selected = [
        a
        for a in candidates
        if start <= as_utc(a.start_time)
        and as_utc(a.start_time).date() <= last_day
        and _matches_goal(goal, a)
    ]
    return sorted(selected, key=lambda a: as_utc(a.start_time))
