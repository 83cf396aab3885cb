import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from goalkernel import db
from goalkernel.engine.router import router as goals_router
from goalkernel.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("GoalKernel starting")
    yield
    await db.engine.dispose()
    logger.info("GoalKernel stopped, database pool disposed")


app = FastAPI(title="GoalKernel", version="0.1.0", lifespan=lifespan)
app.include_router(goals_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "goals": {
            "templates": "/goals/templates",
            "templates_detail": "/goals/templates/{id}",
            "analyze": "/goals/analyze",
            "progress": "/goals/progress?user_id={user_id}",
            "goal_progress": "/goals/{goal_id}/progress",
            "goal_refresh": "/goals/{goal_id}/refresh",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/db")
async def health_db() -> dict[str, str]:
    ok = await db.check_db_connection()
    return {"status": "ok" if ok else "unavailable"}
