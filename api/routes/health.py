"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from core.cache import redis_cache
from database.engine import AsyncSessionLocal

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version="0.1.0")


@router.get("/ready")
async def readiness_check():
    """Readiness check for load balancers: the database and redis must answer."""
    checks = {"database": "ok", "redis": "ok"}

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Readiness: database check failed: {e}")
        checks["database"] = "unavailable"

    try:
        await redis_cache.redis.ping()
    except Exception as e:
        logger.warning(f"Readiness: redis check failed: {e}")
        checks["redis"] = "unavailable"

    if any(value != "ok" for value in checks.values()):
        return JSONResponse(status_code=503, content={"status": "not_ready", "checks": checks})
    return {"status": "ready", "checks": checks}
