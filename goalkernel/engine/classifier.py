"""Status classifier — maps projection to health status and severity."""

from __future__ import annotations

from goalkernel.engine.models import HealthStatus, Severity

AHEAD_THRESHOLD = 100.0
ON_TRACK_THRESHOLD = 90.0
MINOR_THRESHOLD = 70.0
MODERATE_THRESHOLD = 40.0


def classify(
    progress_percentage: float,
    projected_completion_percentage: float,
    days_remaining: int,
) -> tuple[HealthStatus, Severity]:
    """Fixed bands on the projected percentage.

    - projected >= 100 → ahead
    - [90, 100)       → on_track
    - [70, 90)        → behind / minor
    - [40, 70)        → behind / moderate
    - < 40            → behind / major
    A passed deadline without completion is always behind / major.
    """
    if days_remaining == 0 and progress_percentage < AHEAD_THRESHOLD:
        return HealthStatus.behind, Severity.major

    projected = projected_completion_percentage
    if projected >= AHEAD_THRESHOLD:
        return HealthStatus.ahead, Severity.none
    if projected >= ON_TRACK_THRESHOLD:
        return HealthStatus.on_track, Severity.none
    if projected >= MINOR_THRESHOLD:
        return HealthStatus.behind, Severity.minor
    if projected >= MODERATE_THRESHOLD:
        return HealthStatus.behind, Severity.moderate
    return HealthStatus.behind, Severity.major


def course_correction_needed(status: HealthStatus) -> bool:
    return status is HealthStatus.behind
