"""Data-quality filter — drops GPS errors and sensor anomalies.

Pure functions, never raise. Thresholds come from settings so they can be
tuned per deployment without touching the engine.
"""

from __future__ import annotations

from goalkernel.config import settings
from goalkernel.engine.models import ActivityRecord, FilterStats


def pace_s_per_km(activity: ActivityRecord) -> float | None:
    """Seconds per kilometre, or None when distance is not positive."""
    if activity.distance <= 0:
        return None
    return activity.elapsed_time / (activity.distance / 1000.0)


def _rejection_reasons(activity: ActivityRecord) -> list[str]:
    reasons: list[str] = []

    if not settings.quality_min_distance_m <= activity.distance <= settings.quality_max_distance_m:
        reasons.append("distance_outliers")

    pace = pace_s_per_km(activity)
    if activity.elapsed_time <= 0:
        reasons.append("time_invalid")
    elif pace is not None:
        if not settings.quality_min_pace_s_per_km <= pace <= settings.quality_max_pace_s_per_km:
            reasons.append("pace_outliers")
        speed_kmh = (activity.distance / 1000.0) / (activity.elapsed_time / 3600.0)
        if speed_kmh > settings.quality_max_speed_kmh:
            reasons.append("speed_outliers")

    # Elevation gain above the distance covered is a GPS artefact.
    if activity.total_elevation_gain and activity.total_elevation_gain > activity.distance:
        reasons.append("elevation_outliers")

    return reasons


def is_valid_activity(activity: ActivityRecord) -> bool:
    return not _rejection_reasons(activity)


def filter_valid(activities: list[ActivityRecord]) -> list[ActivityRecord]:
    return [a for a in activities if is_valid_activity(a)]


def filter_stats(activities: list[ActivityRecord]) -> FilterStats:
    """Count how many activities each rule rejects (one activity may hit several)."""
    stats = FilterStats(total=len(activities))
    for activity in activities:
        reasons = _rejection_reasons(activity)
        if not reasons:
            stats.valid += 1
            continue
        stats.filtered += 1
        for reason in reasons:
            setattr(stats, reason, getattr(stats, reason) + 1)
    return stats
