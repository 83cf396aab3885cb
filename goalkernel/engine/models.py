"""Goal / activity / analysis contract — Pydantic v2 models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class GoalType(str, Enum):
    distance = "distance"
    pace = "pace"
    frequency = "frequency"
    consistency = "consistency"
    race = "race"


class GoalUnit(str, Enum):
    meters = "meters"
    seconds = "seconds"
    count = "count"


EXPECTED_UNITS: dict[GoalType, GoalUnit] = {
    GoalType.distance: GoalUnit.meters,
    GoalType.pace: GoalUnit.seconds,
    GoalType.race: GoalUnit.seconds,
    GoalType.frequency: GoalUnit.count,
    GoalType.consistency: GoalUnit.count,  # target = number of active weeks
}


class GoalStatus(str, Enum):
    active = "active"
    completed = "completed"
    paused = "paused"
    failed = "failed"


TERMINAL_STATUSES = frozenset({GoalStatus.completed, GoalStatus.failed})


class HealthStatus(str, Enum):
    on_track = "on_track"
    behind = "behind"
    ahead = "ahead"


class Severity(str, Enum):
    none = "none"
    minor = "minor"
    moderate = "moderate"
    major = "major"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.none: 0,
    Severity.minor: 1,
    Severity.moderate: 2,
    Severity.major: 3,
}


class AdjustmentType(str, Enum):
    # Declaration order is the tie-break order for recommendations.
    increase_frequency = "increase_frequency"
    increase_distance = "increase_distance"
    improve_pace = "improve_pace"
    adjust_timeline = "adjust_timeline"

    @property
    def rank(self) -> int:
        return list(AdjustmentType).index(self)


class Trend(str, Enum):
    up = "up"
    down = "down"
    flat = "flat"


class Goal(BaseModel):
    id: str
    user_id: str
    type: GoalType
    target_value: float
    unit: GoalUnit
    target_date: date
    created_at: datetime
    race_distance: float | None = None  # meters; pace / race goals
    race_type: str | None = None  # "any" | "marathon" | ...; frequency goals
    current_value: float = 0.0
    status: GoalStatus = GoalStatus.active

    title: str = ""
    description: str = ""
    priority: str = "medium"  # "high" | "medium" | "low"
    category: str = "annual"  # "annual" | "monthly" | "weekly" | "race_specific"


class ActivityRecord(BaseModel):
    id: str | None = None
    start_time: datetime
    distance: float  # meters
    elapsed_time: float  # seconds
    is_race: bool | None = None
    race_category: str | None = None
    total_elevation_gain: float | None = None


class TimeSeriesPoint(BaseModel):
    day: date
    value: float  # cumulative or instantaneous, in the goal's unit
    progress: float  # same value as progress percentage


class CourseCorrection(BaseModel):
    severity: Severity
    adjustment_type: AdjustmentType
    specific_actions: list[str] = Field(default_factory=list)
    timeline_adjustment_days: int | None = None
    weekly_distance_delta: float | None = None  # meters / week
    weekly_frequency_delta: float | None = None  # activities / week
    target_pace_delta: float | None = None  # seconds / km, negative = faster


class ProgressAnalysis(BaseModel):
    """Snapshot of how one goal is trending. Ephemeral; recomputed each run."""

    goal_id: str
    goal_type: GoalType
    as_of: date
    current_value: float
    target_value: float
    progress_percentage: float
    projected_completion_percentage: float
    projected_completion_date: date | None = None
    days_remaining: int
    days_elapsed: int
    status: HealthStatus
    severity: Severity = Severity.none
    trend: Trend = Trend.flat
    course_correction_needed: bool = False
    series: list[TimeSeriesPoint] = Field(default_factory=list)
    recommendations: list[CourseCorrection] = Field(default_factory=list)


class GoalUpdate(BaseModel):
    """Write-back payload for the goal's cached progress."""

    goal_id: str
    current_value: float
    status: GoalStatus
    analyzed_at: date


class FilterStats(BaseModel):
    total: int = 0
    valid: int = 0
    filtered: int = 0
    distance_outliers: int = 0
    time_invalid: int = 0
    pace_outliers: int = 0
    speed_outliers: int = 0
    elevation_outliers: int = 0


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    goal: Goal
    activities: list[ActivityRecord] = Field(default_factory=list)
    as_of: date | None = None


class GoalProgressItem(BaseModel):
    goal_id: str
    analysis: ProgressAnalysis | None = None
    errors: list[str] = Field(default_factory=list)
