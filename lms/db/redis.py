"""Redis connection management.

Mirrors db/engine.py: when REDIS_URL is configured a shared connection
pool is created at import time; when it is None the progress cache and
the rate limiter fall back to in-process implementations and no Redis
server is needed.

Redis holds only derived or ephemeral data here (cached progress
snapshots, token buckets).  Losing it costs a cache warm-up, never a
student's progress.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from lms.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis: ping on startup, close on shutdown.

    A failed ping is logged and startup continues; the cache and rate
    limiter surface their own errors per request.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured; cache and rate limiter run in-process")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected")
    except aioredis.RedisError:
        logger.exception("Redis connection failed on startup")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
