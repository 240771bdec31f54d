"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from roastledger.application.dto.responses import ComponentHealthResponse, HealthResponse
from roastledger.config import get_logger, get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        storage_backend=settings.storage.backend,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity and response time. The memory backend is
    always available.
    """
    settings = get_settings()
    backend = settings.storage.backend

    if backend == "memory":
        db_status = ComponentHealthResponse(name="memory", available=True)
    else:
        from roastledger.infrastructure.storage.sqlite import get_connection

        try:
            start = time.time()
            async with get_connection() as conn:
                await conn.execute("SELECT 1")
            latency = (time.time() - start) * 1000

            db_status = ComponentHealthResponse(
                name="sqlite",
                available=True,
                details={"latency_ms": round(latency, 2)},
            )

        except Exception as e:
            logger.warning("db_health_check_failed", error=str(e))
            db_status = ComponentHealthResponse(
                name="sqlite",
                available=False,
                details={"error": str(e)},
            )

    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        storage_backend=backend,
        database=db_status,
    )
