"""Liveness endpoint with dependency status.

Always answers 200 while the process can respond; ``status`` says
whether a configured backing service is unreachable.  Returning 503 here
would make an orchestrator restart the container over a Redis blip,
which the in-memory fallbacks do not need.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lms.db.engine import engine
from lms.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except RedisError:
            logger.warning("Health check: redis unreachable")
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    if engine is not None:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except (SQLAlchemyError, OSError):
            logger.warning("Health check: database unreachable")
            checks["database"] = "degraded"
            overall = "degraded"
    else:
        checks["database"] = "not_configured"

    return {"status": overall, "checks": checks}
