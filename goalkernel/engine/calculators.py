"""Progress calculators — one per goal type, pure and total.

Every calculator receives a validated goal plus the activities the goal filter
selected (ascending by start time) and returns the current value, the progress
percentage and the daily time series the projector fits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import assert_never

from goalkernel.engine.filters import as_utc, window_end
from goalkernel.engine.models import ActivityRecord, Goal, GoalType, TimeSeriesPoint


@dataclass(frozen=True, slots=True)
class ProgressResult:
    current_value: float
    progress_percentage: float
    series: list[TimeSeriesPoint] = field(default_factory=list)


def _day(activity: ActivityRecord) -> date:
    return as_utc(activity.start_time).date()


def _bounds(goal: Goal, as_of: date) -> tuple[date, date]:
    created = as_utc(goal.created_at).date()
    return created, max(window_end(goal, as_of), created)


def _to_series(points: list[tuple[date, float]], to_progress) -> list[TimeSeriesPoint]:
    """One point per day; a later value on the same day replaces an earlier one."""
    by_day: dict[date, float] = {}
    for day, value in points:
        by_day[day] = value
    return [
        TimeSeriesPoint(day=day, value=value, progress=to_progress(value))
        for day, value in sorted(by_day.items())
    ]


def _ratio_pct(value: float, target: float) -> float:
    return 100.0 * value / target


def _cumulative(goal: Goal, increments: list[tuple[date, float]], as_of: date) -> ProgressResult:
    created, end = _bounds(goal, as_of)
    total = 0.0
    points: list[tuple[date, float]] = [(created, 0.0)]
    for day, amount in increments:
        total += amount
        points.append((day, total))
    points.append((end, total))
    series = _to_series(points, lambda v: _ratio_pct(v, goal.target_value))
    return ProgressResult(total, _ratio_pct(total, goal.target_value), series)


def distance_progress(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressResult:
    """Sum of distance in meters. Progress is uncapped."""
    return _cumulative(goal, [(_day(a), a.distance) for a in activities], as_of)


def frequency_progress(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressResult:
    """Count of qualifying activities."""
    return _cumulative(goal, [(_day(a), 1.0) for a in activities], as_of)


def normalized_time(activity: ActivityRecord, race_distance: float) -> float:
    """Elapsed time scaled linearly to race_distance (constant pace)."""
    return activity.elapsed_time * race_distance / activity.distance


def pace_progress(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressResult:
    """Best normalised time at race_distance.

    Lower time means more progress: progress = 100 * target / best. No
    qualifying activity yet gives 0, never NaN.
    """
    _, end = _bounds(goal, as_of)
    race_distance = goal.race_distance or 0.0

    best: float | None = None
    points: list[tuple[date, float]] = []
    for a in activities:
        if a.elapsed_time <= 0 or a.distance <= 0:
            continue
        t = normalized_time(a, race_distance)
        best = t if best is None else min(best, t)
        points.append((_day(a), best))

    if best is None:
        return ProgressResult(0.0, 0.0, [])

    points.append((end, best))
    series = _to_series(points, lambda v: 100.0 * goal.target_value / v)
    return ProgressResult(best, 100.0 * goal.target_value / best, series)


def consistency_progress(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressResult:
    """Fraction of elapsed 7-day buckets (from creation) with at least one activity."""
    created, end = _bounds(goal, as_of)
    n_weeks = max(1, math.ceil(((end - created).days + 1) / 7))

    active_weeks = {(_day(a) - created).days // 7 for a in activities}

    points: list[tuple[date, float]] = []
    running = 0
    for week in range(n_weeks):
        if week in active_weeks:
            running += 1
        week_end = min(created + timedelta(days=7 * week + 6), end)
        points.append((week_end, running / (week + 1)))

    fraction = running / n_weeks
    series = _to_series(points, lambda v: 100.0 * v)
    return ProgressResult(fraction, 100.0 * fraction, series)


def calculate(goal: Goal, activities: list[ActivityRecord], as_of: date) -> ProgressResult:
    """Dispatch on goal type. Every GoalType must have a branch."""
    match goal.type:
        case GoalType.distance:
            return distance_progress(goal, activities, as_of)
        case GoalType.pace | GoalType.race:
            return pace_progress(goal, activities, as_of)
        case GoalType.frequency:
            return frequency_progress(goal, activities, as_of)
        case GoalType.consistency:
            return consistency_progress(goal, activities, as_of)
        case _:
            assert_never(goal.type)
