"""
Health check endpoint for monitoring and orchestration.

Reports:
- Database connectivity and round-trip time
- Result cache size and hit counters
- Uptime

Used by container health checks, load balancers and uptime monitors.
"""

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from qrinsights.core.cache import ResultCache, get_result_cache
from qrinsights.core.db import get_db

router = APIRouter(tags=["health"])

# Global app start time (set in lifespan)
_app_start_time: datetime | None = None


def set_app_start_time(start_time: datetime) -> None:
    """Called by lifespan to track when app started."""
    global _app_start_time
    _app_start_time = start_time


def get_uptime_seconds() -> int:
    """Calculate seconds since app start."""
    if _app_start_time is None:
        return 0
    return int((datetime.now() - _app_start_time).total_seconds())


async def check_database(db: AsyncSession) -> dict[str, Any]:
    """
    Check database connectivity.

    Returns: {"status": "ok"|"down", "response_time_ms": N, "error": str (if down)}
    """
    start = time.time()
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "ok",
            "response_time_ms": int((time.time() - start) * 1000),
        }
    except Exception as e:
        return {
            "status": "down",
            "response_time_ms": int((time.time() - start) * 1000),
            "error": type(e).__name__,
        }


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns 200 even when the database is down; see `status`.",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> JSONResponse:
    """
    Example response (degraded):
        {
            "status": "degraded",
            "uptime_seconds": 3600,
            "checks": {
                "database": {"status": "down", "response_time_ms": 1000,
                             "error": "OperationalError"},
                "cache": {"size": 12, "max_entries": 100, "ttl_seconds": 60.0,
                          "hits": 40, "misses": 12}
            }
        }
    """
    db_check = await check_database(db)

    return JSONResponse(
        content={
            "status": "ok" if db_check["status"] == "ok" else "degraded",
            "uptime_seconds": get_uptime_seconds(),
            "checks": {
                "database": db_check,
                "cache": cache.stats(),
            },
        },
        status_code=status.HTTP_200_OK,
    )
