"""Trend projector — pure stateless math, never raises."""

from __future__ import annotations

import math
from datetime import date, timedelta

from goalkernel.config import settings
from goalkernel.engine.filters import as_utc
from goalkernel.engine.models import ActivityRecord, Goal, GoalType, TimeSeriesPoint, Trend


def fit_rate(series: list[TimeSeriesPoint], window: int | None = None) -> float | None:
    """Least-squares slope of progress vs. elapsed days over the trailing window.

    Returns None with fewer than 2 points or a zero time span.
    """
    size = window if window is not None else settings.trend_window_points
    subset = series[-size:] if size > 0 else series
    if len(subset) < 2:
        return None

    origin = subset[0].day
    xs = [float((p.day - origin).days) for p in subset]
    ys = [p.progress for p in subset]

    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)
    sxx = sum((x - mean_x) ** 2 for x in xs)
    if sxx == 0.0:
        return None
    sxy = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    return sxy / sxx


def project(series: list[TimeSeriesPoint], target_date: date, goal_type: GoalType) -> float:
    """Projected progress percentage at `target_date`.

    current + rate * days_left. Degenerate input (no trend, no time left)
    projects flat at current progress.
    """
    if not series:
        return 0.0

    current = series[-1].progress
    days_left = (target_date - series[-1].day).days
    rate = fit_rate(series)

    if rate is None or days_left <= 0:
        projected = current
    else:
        projected = current + rate * days_left

    projected = max(0.0, projected)
    if goal_type is GoalType.consistency:
        # A fraction of weeks cannot exceed 100%.
        projected = min(100.0, projected)
    return projected


def projected_completion_date(series: list[TimeSeriesPoint], goal: Goal) -> date | None:
    """Date at which progress reaches 100% at the fitted rate.

    Capped at twice the goal's original timeline. None when there is no
    positive rate to extrapolate.
    """
    if not series:
        return None

    reached = next((p.day for p in series if p.progress >= 100.0), None)
    if reached is not None:
        return reached

    rate = fit_rate(series)
    if rate is None or rate <= 0.0:
        return None

    last = series[-1]
    days_needed = math.ceil((100.0 - last.progress) / rate)
    created = as_utc(goal.created_at).date()
    cap = created + 2 * (goal.target_date - created)
    return min(last.day + timedelta(days=days_needed), cap)


def compute_trend(
    recent_values: list[float],
    prior_values: list[float],
    threshold: float = 0.05,
) -> Trend:
    """Compare recent vs prior window averages.

    Empty inputs yield flat.
    """
    if not recent_values or not prior_values:
        return Trend.flat
    recent_avg = sum(recent_values) / len(recent_values)
    prior_avg = sum(prior_values) / len(prior_values)
    if prior_avg == 0.0:
        return Trend.up if recent_avg > 0 else Trend.flat
    ratio = recent_avg / prior_avg
    if ratio >= 1.0 + threshold:
        return Trend.up
    if ratio <= 1.0 - threshold:
        return Trend.down
    return Trend.flat


def weekly_volumes(activities: list[ActivityRecord], end: date, weeks: int) -> list[float]:
    """Distance per 7-day bucket for the `weeks` buckets ending on `end`, oldest first."""
    totals = [0.0] * weeks
    for a in activities:
        offset = (end - as_utc(a.start_time).date()).days
        if 0 <= offset < weeks * 7:
            totals[weeks - 1 - offset // 7] += a.distance
    return totals


def _trend_weeks(window_days: int | None = None) -> int:
    days = window_days if window_days is not None else settings.trend_recent_days
    return max(1, days // 7)


def trend_history_days(window_days: int | None = None) -> int:
    """Days of activity history ending on the last window day that volume_trend reads."""
    return 2 * _trend_weeks(window_days) * 7


def volume_trend(activities: list[ActivityRecord], end: date, window_days: int | None = None) -> Trend:
    """Recent weekly running volume against the window right before it."""
    weeks = _trend_weeks(window_days)
    volumes = weekly_volumes(activities, end, 2 * weeks)
    prior, recent = volumes[:weeks], volumes[weeks:]
    if not any(volumes):
        return Trend.flat
    return compute_trend(recent, prior)
