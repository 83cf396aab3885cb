"""Goals HTTP router — templates, stateless analysis, stored-goal progress."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from goalkernel.config import settings
from goalkernel.db import get_session
from goalkernel.engine import connector, engine
from goalkernel.engine.cache import AnalysisCache, AnalysisKey, goal_digest
from goalkernel.engine.errors import ValidationError
from goalkernel.engine.models import (
    AnalyzeRequest,
    Goal,
    GoalProgressItem,
    GoalType,
    GoalUpdate,
    ProgressAnalysis,
)
from goalkernel.engine.templates import get_template, list_templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/goals", tags=["goals"])

_analysis_cache = AnalysisCache(max_size=settings.analysis_cache_size)


def get_analysis_cache() -> AnalysisCache:
    return _analysis_cache


def _today() -> date:
    return datetime.now(ZoneInfo(settings.default_tz)).date()


def _invalid_goal(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"message": "This goal's configuration is invalid", "errors": exc.errors},
    )


async def _load_goal(session: AsyncSession, goal_id: str) -> Goal:
    goal = await connector.fetch_goal(session, goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail=f"Unknown goal: {goal_id}")
    return goal


async def _analyze_stored(session: AsyncSession, goal: Goal, as_of: date) -> ProgressAnalysis:
    from_date, to_date = engine.activity_window(goal, as_of)
    activities = await connector.fetch_activities(session, goal.user_id, from_date, to_date)
    try:
        return engine.analyze(goal, activities, as_of)
    except ValidationError as exc:
        raise _invalid_goal(exc)


# ---------------------------------------------------------------------------
# /goals/templates
# ---------------------------------------------------------------------------


@router.get("/templates")
async def templates_list(
    goal_type: GoalType | None = Query(default=None, alias="type", description="Filter by goal type"),
) -> list[dict]:
    return [asdict(t) for t in list_templates(goal_type)]


@router.get("/templates/{template_id}")
async def template_detail(template_id: str) -> dict:
    template = get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template: {template_id}")
    return asdict(template)


# ---------------------------------------------------------------------------
# /goals/analyze: stateless, caller supplies goal + activities
# ---------------------------------------------------------------------------


@router.post("/analyze", response_model=ProgressAnalysis)
async def analyze_goal(body: AnalyzeRequest) -> ProgressAnalysis:
    as_of = body.as_of or _today()
    try:
        return engine.analyze(body.goal, body.activities, as_of)
    except ValidationError as exc:
        raise _invalid_goal(exc)


# ---------------------------------------------------------------------------
# Stored goals
# ---------------------------------------------------------------------------


@router.get("/progress", response_model=list[GoalProgressItem])
async def user_progress(
    user_id: str = Query(..., description="Owner of the goals"),
    as_of: date | None = Query(default=None, description="Analysis date (default: today)"),
    session: AsyncSession = Depends(get_session),
) -> list[GoalProgressItem]:
    """Analyze every active or paused goal of a user."""
    as_of = as_of or _today()
    goals = await connector.fetch_active_goals(session, user_id)
    if not goals:
        return []

    windows = [engine.activity_window(g, as_of) for g in goals]
    from_date = min(start for start, _ in windows)
    to_date = max(end for _, end in windows)
    activities = await connector.fetch_activities(session, user_id, from_date, to_date)

    items: list[GoalProgressItem] = []
    for goal_id, outcome in engine.analyze_many(goals, activities, as_of).items():
        if isinstance(outcome, ValidationError):
            items.append(GoalProgressItem(goal_id=goal_id, errors=outcome.errors))
        else:
            items.append(GoalProgressItem(goal_id=goal_id, analysis=outcome))
    return items


@router.get("/{goal_id}/progress", response_model=ProgressAnalysis)
async def goal_progress(
    goal_id: str,
    as_of: date | None = Query(default=None, description="Analysis date (default: today)"),
    session: AsyncSession = Depends(get_session),
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> ProgressAnalysis:
    as_of = as_of or _today()
    goal = await _load_goal(session, goal_id)

    cursor = await connector.fetch_store_cursor(session, goal.user_id)
    key = AnalysisKey(goal_id=goal.id, goal_digest=goal_digest(goal), store_cursor=cursor, as_of=as_of)
    cached = cache.get(key)
    if cached is not None:
        return cached

    analysis = await _analyze_stored(session, goal, as_of)
    cache.put(key, analysis)
    return analysis


@router.post("/{goal_id}/refresh")
async def refresh_goal(
    goal_id: str,
    as_of: date | None = Query(default=None, description="Analysis date (default: today)"),
    session: AsyncSession = Depends(get_session),
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> dict:
    """Recompute from scratch and write current_value/status back to the goal."""
    as_of = as_of or _today()
    goal = await _load_goal(session, goal_id)
    analysis = await _analyze_stored(session, goal, as_of)

    update: GoalUpdate = engine.derive_goal_update(goal, analysis)
    applied = await connector.write_goal_progress(session, update)
    cache.invalidate(goal.id)

    return {
        "update": update.model_dump(mode="json"),
        "applied": applied,
        "analysis": analysis.model_dump(mode="json"),
    }
