"""Static goal templates — popular running goals, config only, no DB."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from goalkernel.engine.models import Goal, GoalType, GoalUnit


@dataclass(frozen=True, slots=True)
class GoalTemplate:
    id: str
    type: GoalType
    title: str
    description: str
    target_value: float
    unit: GoalUnit
    timeframe: str  # "monthly" | "annual" | "race_specific"
    difficulty: str  # "beginner" | "intermediate" | "advanced"
    priority: str = "medium"
    race_distance: float | None = None
    race_type: str | None = None


TEMPLATES: dict[str, GoalTemplate] = {
    t.id: t
    for t in (
        # Distance
        GoalTemplate(
            id="distance-500km-annual",
            type=GoalType.distance,
            title="500km this year",
            description="A great starting goal for new runners.",
            target_value=500_000,
            unit=GoalUnit.meters,
            timeframe="annual",
            difficulty="beginner",
        ),
        GoalTemplate(
            id="distance-1000km-annual",
            type=GoalType.distance,
            title="1000km this year",
            description="The classic annual distance goal.",
            target_value=1_000_000,
            unit=GoalUnit.meters,
            timeframe="annual",
            difficulty="intermediate",
        ),
        GoalTemplate(
            id="distance-2500km-annual",
            type=GoalType.distance,
            title="2500km this year",
            description="For serious runners.",
            target_value=2_500_000,
            unit=GoalUnit.meters,
            timeframe="annual",
            difficulty="advanced",
            priority="high",
        ),
        GoalTemplate(
            id="distance-100km-monthly",
            type=GoalType.distance,
            title="100km this month",
            description="Run 100 kilometers in a single month.",
            target_value=100_000,
            unit=GoalUnit.meters,
            timeframe="monthly",
            difficulty="intermediate",
        ),
        # Pace (finish time at race distance)
        GoalTemplate(
            id="pace-5k-30min",
            type=GoalType.pace,
            title="5K under 30 minutes",
            description="Break the 30 minute barrier over 5K.",
            target_value=1800,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="beginner",
            race_distance=5000,
        ),
        GoalTemplate(
            id="pace-5k-25min",
            type=GoalType.pace,
            title="5K under 25 minutes",
            description="A solid intermediate 5K target.",
            target_value=1500,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="intermediate",
            race_distance=5000,
        ),
        GoalTemplate(
            id="pace-5k-20min",
            type=GoalType.pace,
            title="5K under 20 minutes",
            description="Sub-20 5K for competitive runners.",
            target_value=1200,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="advanced",
            priority="high",
            race_distance=5000,
        ),
        GoalTemplate(
            id="pace-10k-60min",
            type=GoalType.pace,
            title="10K under 60 minutes",
            description="Run 10K in under an hour.",
            target_value=3600,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="beginner",
            race_distance=10_000,
        ),
        GoalTemplate(
            id="pace-10k-50min",
            type=GoalType.pace,
            title="10K under 50 minutes",
            description="Sub-50 10K.",
            target_value=3000,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="intermediate",
            race_distance=10_000,
        ),
        # Race results (race-flagged efforts only)
        GoalTemplate(
            id="race-half-2hours",
            type=GoalType.race,
            title="Half marathon under 2 hours",
            description="Finish a half marathon race in under 2:00:00.",
            target_value=7200,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="intermediate",
            race_distance=21_097,
        ),
        GoalTemplate(
            id="race-marathon-4hours",
            type=GoalType.race,
            title="Marathon under 4 hours",
            description="Finish a marathon race in under 4:00:00.",
            target_value=14_400,
            unit=GoalUnit.seconds,
            timeframe="race_specific",
            difficulty="advanced",
            priority="high",
            race_distance=42_195,
        ),
        # Frequency
        GoalTemplate(
            id="frequency-12-races",
            type=GoalType.frequency,
            title="12 races this year",
            description="One race a month, any distance.",
            target_value=12,
            unit=GoalUnit.count,
            timeframe="annual",
            difficulty="intermediate",
            race_type="any",
        ),
        GoalTemplate(
            id="frequency-4-half-marathons",
            type=GoalType.frequency,
            title="4 half marathons this year",
            description="A half marathon every season.",
            target_value=4,
            unit=GoalUnit.count,
            timeframe="annual",
            difficulty="advanced",
            race_type="half_marathon",
        ),
        # Consistency
        GoalTemplate(
            id="consistency-weekly-runner",
            type=GoalType.consistency,
            title="Run every week",
            description="At least one run in every week of the year.",
            target_value=52,
            unit=GoalUnit.count,
            timeframe="annual",
            difficulty="beginner",
        ),
    )
}


def list_templates(goal_type: GoalType | None = None) -> list[GoalTemplate]:
    if goal_type is None:
        return list(TEMPLATES.values())
    return [t for t in TEMPLATES.values() if t.type is goal_type]


def get_template(template_id: str) -> GoalTemplate | None:
    return TEMPLATES.get(template_id)


def build_goal(
    template: GoalTemplate,
    goal_id: str,
    user_id: str,
    created_at: datetime,
    target_date: date,
) -> Goal:
    """Instantiate a Goal from a template. Validation happens at analysis time."""
    return Goal(
        id=goal_id,
        user_id=user_id,
        type=template.type,
        target_value=template.target_value,
        unit=template.unit,
        target_date=target_date,
        created_at=created_at,
        race_distance=template.race_distance,
        race_type=template.race_type,
        title=template.title,
        description=template.description,
        priority=template.priority,
        category=template.timeframe,
    )
