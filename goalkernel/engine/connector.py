"""Database connector — async access to the goals and runs tables.

The sync pipeline owns these tables; this module only reads runs, reads goals
and writes back the cached progress columns of a goal. Goal type specifics
(race distance / race type) live in goals.additional_details (JSONB).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from goalkernel.engine.models import ActivityRecord, Goal, GoalUpdate

logger = logging.getLogger(__name__)

_GOAL_COLUMNS = (
    "id, user_id, type, target_value, unit, target_date, created_at, "
    "current_value, status, title, description, priority, category, additional_details"
)


def _row_to_goal(row: dict[str, Any]) -> Goal:
    details = row.get("additional_details") or {}
    return Goal(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        type=row["type"],
        target_value=float(row["target_value"]),
        unit=row["unit"],
        target_date=row["target_date"],
        created_at=row["created_at"],
        race_distance=details.get("raceDistance"),
        race_type=details.get("raceType"),
        current_value=float(row.get("current_value") or 0.0),
        status=row.get("status") or "active",
        title=row.get("title") or "",
        description=row.get("description") or "",
        priority=row.get("priority") or "medium",
        category=row.get("category") or "annual",
    )


def _row_to_activity(row: dict[str, Any]) -> ActivityRecord:
    return ActivityRecord(
        id=str(row["id"]),
        start_time=row["start_date"],
        distance=float(row["distance"] or 0.0),
        elapsed_time=float(row["moving_time"] or 0.0),
        is_race=row.get("is_race"),
        race_category=row.get("race_category"),
        total_elevation_gain=row.get("total_elevation_gain"),
    )


async def fetch_goal(session: AsyncSession, goal_id: str) -> Goal | None:
    """Single goal by id. Returns None when nothing found."""
    result = await session.execute(
        text(f"SELECT {_GOAL_COLUMNS} FROM goals WHERE id = :goal_id"),
        {"goal_id": goal_id},
    )
    row = result.fetchone()
    if row is None:
        return None
    return _row_to_goal(dict(zip(result.keys(), row)))


async def fetch_active_goals(session: AsyncSession, user_id: str) -> list[Goal]:
    """All goals of a user that are neither completed nor failed."""
    result = await session.execute(
        text(
            f"SELECT {_GOAL_COLUMNS} FROM goals "
            "WHERE user_id = :user_id AND status IN ('active', 'paused') "
            "ORDER BY created_at, id"
        ),
        {"user_id": user_id},
    )
    columns = result.keys()
    return [_row_to_goal(dict(zip(columns, r))) for r in result.fetchall()]


async def fetch_activities(
    session: AsyncSession,
    user_id: str,
    from_date: date,
    to_date: date,
) -> list[ActivityRecord]:
    """Runs for [from_date, to_date] inclusive, ordered by start time.

    Returns an empty list when nothing is found.
    """
    start = datetime.combine(from_date, time.min, tzinfo=timezone.utc)
    end_exclusive = datetime.combine(to_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    result = await session.execute(
        text(
            "SELECT id, start_date, distance, moving_time, total_elevation_gain, "
            "is_race, race_category "
            "FROM runs "
            "WHERE user_id = :user_id AND start_date >= :start AND start_date < :end "
            "ORDER BY start_date, id"
        ),
        {"user_id": user_id, "start": start, "end": end_exclusive},
    )
    columns = result.keys()
    return [_row_to_activity(dict(zip(columns, r))) for r in result.fetchall()]


async def fetch_store_cursor(session: AsyncSession, user_id: str) -> str:
    """Marker of the user's activity store state: latest update time + row count."""
    result = await session.execute(
        text("SELECT MAX(updated_at) AS latest, COUNT(*) AS n FROM runs WHERE user_id = :user_id"),
        {"user_id": user_id},
    )
    row = result.fetchone()
    if row is None:
        return "empty"
    data = dict(zip(result.keys(), row))
    latest = data.get("latest")
    latest_str = latest.isoformat() if latest is not None else "none"
    return f"{latest_str}:{data.get('n') or 0}"


async def write_goal_progress(session: AsyncSession, update: GoalUpdate) -> bool:
    """Persist cached progress unless a newer analysis already landed.

    Returns True when the row was updated.
    """
    result = await session.execute(
        text(
            "UPDATE goals "
            "SET current_value = :current_value, status = :status, "
            "last_analyzed_at = :analyzed_at, updated_at = NOW() "
            "WHERE id = :goal_id "
            "AND (last_analyzed_at IS NULL OR last_analyzed_at <= :analyzed_at)"
        ),
        {
            "goal_id": update.goal_id,
            "current_value": update.current_value,
            "status": update.status.value,
            "analyzed_at": update.analyzed_at,
        },
    )
    await session.commit()
    applied = (result.rowcount or 0) > 0
    if not applied:
        logger.info("Skipped write-back for goal %s: a newer analysis is stored", update.goal_id)
    return applied
