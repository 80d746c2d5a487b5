"""Read-through cache for progress snapshots.

Flow:  GET progress -> cache hit  -> return
                    -> cache miss -> compute from repos -> populate -> return

Two invalidation mechanisms cover each other:

  1. TTL: every entry expires after PROGRESS_CACHE_TTL seconds, so a
     missed invalidation only serves stale data for a bounded time.
  2. Explicit deletes: a progress report deletes that student's key;
     editing or deleting a course deletes every key for the course.

Keys are ``progress:{course_id}:{user_id}`` so a whole course can be
dropped with the prefix pattern ``progress:{course_id}:*``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lms.db.redis import redis_pool


@runtime_checkable
class CacheService(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a cached value.  Returns None on cache miss."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with a TTL."""
        ...

    async def delete(self, key: str) -> None:
        """Explicitly invalidate a cached entry."""
        ...

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching a trailing-wildcard pattern."""
        ...


class InMemoryCacheService:
    """Per-process cache for dev and tests; TTLs are not enforced."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = value

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def delete_pattern(self, pattern: str) -> None:
        prefix = pattern.rstrip("*")
        for k in [k for k in self._store if k.startswith(prefix)]:
            del self._store[k]


class RedisCacheService:
    """Redis-backed cache shared by all API instances."""

    _PREFIX = "cache:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(f"{self._PREFIX}{key}", ttl_seconds, value)

    async def delete(self, key: str) -> None:
        await self._redis.delete(f"{self._PREFIX}{key}")

    async def delete_pattern(self, pattern: str) -> None:
        # SCAN walks the keyspace in batches instead of blocking Redis like KEYS
        cursor = 0
        while True:
            cursor, keys = await self._redis.scan(
                cursor, match=f"{self._PREFIX}{pattern}", count=100
            )
            if keys:
                await self._redis.delete(*keys)
            if cursor == 0:
                break


def progress_key(course_id: object, user_id: str) -> str:
    return f"progress:{course_id}:{user_id}"


def course_progress_pattern(course_id: object) -> str:
    return f"progress:{course_id}:*"


if redis_pool is not None:
    cache_service: CacheService = RedisCacheService(redis_pool)
else:
    cache_service = InMemoryCacheService()
