"""Health check endpoints router for monitoring service availability."""

import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse

from src.luxgold.api.http.deps import get_database_service
from src.luxgold.core.services.database.db_session import describe_database_target
from src.luxgold.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness check. Does not check dependencies."""
    return {
        "status": "healthy",
        "service": "api",
        "environment": get_config().app.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/db", response_model=None)
async def health_database(request: Request) -> dict[str, Any] | JSONResponse:
    """Database connectivity with connection pool status.

    Returns 503 when the database cannot be reached.
    """
    db_service = get_database_service(request)
    config = get_config()

    start = time.perf_counter()
    healthy = await run_in_threadpool(db_service.health_check)
    latency_ms = round((time.perf_counter() - start) * 1000, 1)

    body: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "database": {
            "type": "sqlite" if config.database.is_sqlite else "postgresql",
            "target": describe_database_target(config.database.url),
            "latency_ms": latency_ms,
        },
        "pool": db_service.get_pool_status(),
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if not healthy:
        return JSONResponse(status_code=503, content=body)
    return body
