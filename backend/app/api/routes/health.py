"""Health check endpoints.

- /health: process is up
- /healthz: database and Redis connectivity, when configured
"""

import logging
from typing import Any

import redis
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend.app.config import Settings
from backend.app.db.engine import get_async_engine

logger = logging.getLogger(__name__)

router = APIRouter()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (True, "in_memory")

    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except redis.RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(request: Request) -> dict[str, Any] | JSONResponse:
    """Dependency health check.

    Returns:
        200 with component status if core systems ok
        503 if a configured dependency fails
    """
    settings: Settings = request.app.state.settings

    db_ok, db_status = await check_db(settings)
    redis_ok, redis_status = await check_redis(settings)

    core_ok = db_ok and redis_ok
    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {"db": db_status, "redis": redis_status},
    }

    if not core_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
