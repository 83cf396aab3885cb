"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from goalkernel.db import get_session
from goalkernel.engine.models import ActivityRecord, Goal
from goalkernel.engine.router import get_analysis_cache
from goalkernel.engine.cache import AnalysisCache
from goalkernel.main import app


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession used in connector and endpoint tests."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, rowcount: int = 1):
        self._rows = rows or []
        self._rowcount = rowcount
        self.statements: list[tuple[str, dict | None]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        self.statements.append((str(stmt), params))
        return FakeResult(self._rows, self._rowcount)

    async def commit(self):
        self.commits += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]], rowcount: int = 1):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []
        self.rowcount = rowcount

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]

    def fetchone(self):
        rows = self.fetchall()
        return rows[0] if rows else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_session():
    """Return a FakeSession with no rows (override _rows in tests if needed)."""
    return FakeSession()


@pytest.fixture()
def analysis_cache():
    return AnalysisCache(max_size=16)


@pytest.fixture()
def override_session(fake_session, analysis_cache):
    """Override the FastAPI dependencies so no real DB or shared cache is used."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    app.dependency_overrides[get_analysis_cache] = lambda: analysis_cache
    yield fake_session
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

CREATED = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_goal(**overrides: Any) -> Goal:
    """Distance goal: 1000 km in 2026, unless overridden."""
    defaults: dict[str, Any] = dict(
        id="goal-1",
        user_id="user-1",
        type="distance",
        target_value=1_000_000.0,
        unit="meters",
        target_date=date(2026, 12, 31),
        created_at=CREATED,
    )
    defaults.update(overrides)
    return Goal(**defaults)


def make_activity(
    day: date,
    distance: float = 10_000.0,
    elapsed_time: float | None = None,
    hour: int = 7,
    **overrides: Any,
) -> ActivityRecord:
    """A run at 5:00/km unless elapsed_time is given."""
    if elapsed_time is None:
        elapsed_time = distance / 1000.0 * 300.0
    return ActivityRecord(
        id=overrides.pop("id", f"run-{day.isoformat()}-{hour}"),
        start_time=datetime.combine(day, time(hour=hour), tzinfo=timezone.utc),
        distance=distance,
        elapsed_time=elapsed_time,
        **overrides,
    )


def weekly_runs(start: date, weeks: int, distance: float = 10_000.0) -> list[ActivityRecord]:
    """One run per week starting on `start`."""
    return [make_activity(start + timedelta(weeks=i), distance) for i in range(weeks)]
