"""Health probes.

``/health/live`` never touches the database. ``/health`` and
``/health/ready`` run a trivial query and answer 503 when it fails, so
an orchestrator stops routing redirects to an instance without storage.
"""

import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.core.config import settings
from shortlinks.db.session import get_db

router = APIRouter(prefix="/health", tags=["health"])


async def check_database(db: AsyncSession) -> dict:
    """Round-trip ``SELECT 1`` and report its latency."""
    start_time = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": e.__class__.__name__}

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
    }


def _status_code(healthy: bool) -> int:
    return status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE


@router.get("", summary="Component health")
async def health_check(db: AsyncSession = Depends(get_db)):
    database = await check_database(db)
    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=_status_code(healthy),
        content={
            "status": "healthy" if healthy else "degraded",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT.value,
            "timestamp": time.time(),
            "components": {"database": database},
        },
    )


@router.get("/ready", summary="Readiness probe")
async def readiness_probe(db: AsyncSession = Depends(get_db)):
    """Ready once the link store answers."""
    database = await check_database(db)
    ready = database["status"] == "healthy"
    return JSONResponse(
        status_code=_status_code(ready),
        content={"ready": ready, "components": {"database": ready}},
    )


@router.get("/live", summary="Liveness probe")
async def liveness_probe():
    return {"alive": True}
