"""Token-bucket rate limiting.

WHY LIMIT THIS SERVICE AT ALL?
-------------------------------
Two endpoints attract abuse.  The enrollment endpoint accepts a short,
human-chosen access code, so an unthrottled client can simply try codes
until one works.  Progress reporting is called by the player on every
lecture, so a buggy client can flood the store with writes.  Both need
a per-caller ceiling that ordinary use never reaches.

HOW THE BUCKET WORKS
---------------------
Every caller key owns a bucket holding up to ``capacity`` tokens.  The
bucket refills continuously at ``refill_rate`` tokens per second.  Each
request spends one token; an empty bucket means 429 until it refills.

  capacity     = the burst a caller may send at once
  refill_rate  = the long-run average the caller is held to

A student opening a course fires several requests in a row (detail,
progress, enrollments), which fits comfortably inside the default burst.
Someone guessing access codes burns through the small enrollment bucket
after ten tries and then gets one more guess every six seconds.

STATE PER CALLER
-----------------
Only two numbers are kept per key: the token count and the time of the
last refill.  The refill is computed lazily when the next request
arrives, so idle buckets cost nothing but their storage and expire in
Redis once they would have refilled anyway.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of a rate limit check.

    allowed:      True if the request may proceed.
    remaining:    Whole tokens left in the bucket.
    limit:        The bucket's capacity.
    retry_after:  Seconds until the next token is available (0 if allowed).
    """

    allowed: bool
    remaining: int
    limit: int
    retry_after: float


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity: burst size; refill_rate: tokens added per second."""

    capacity: int = 60
    refill_rate: float = 1.0


# Roughly ten guesses, then one every six seconds
ENROLLMENT_LIMIT = RateLimitConfig(capacity=10, refill_rate=1 / 6)


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


class InMemoryRateLimiter:
    """Per-process buckets; with several API instances each keeps its own."""

    def __init__(self) -> None:
        # key -> (tokens, last_refill monotonic time)
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()

        if key not in self._buckets:
            self._buckets[key] = (config.capacity - 1, now)
            return RateLimitResult(
                allowed=True,
                remaining=config.capacity - 1,
                limit=config.capacity,
                retry_after=0,
            )

        tokens, last_refill = self._buckets[key]
        tokens = min(config.capacity, tokens + (now - last_refill) * config.refill_rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=True,
                remaining=int(tokens),
                limit=config.capacity,
                retry_after=0,
            )

        self._buckets[key] = (tokens, now)
        return RateLimitResult(
            allowed=False,
            remaining=0,
            limit=config.capacity,
            retry_after=(1 - tokens) / config.refill_rate,
        )

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)


class RedisRateLimiter:
    """Redis-backed token bucket, shared by every API instance.

    WHY ONE LUA SCRIPT:
    Checking a bucket is read, refill, spend, write back.  Done as
    separate commands, two enrollment attempts arriving together could
    both read "1 token left" and both be let through, handing a code
    guesser a free attempt on every race.

    Redis runs a Lua script as a single step with nothing interleaved,
    so the count stays exact however many instances share the bucket.
    The key's TTL is set past the full-refill time, after which a fresh
    bucket would look identical anyway.
    """

    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1])
    local last_refill = tonumber(bucket[2])

    if tokens == nil then
        tokens = capacity - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, tokens, 0}
    end

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    if tokens >= 1 then
        tokens = tokens - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, math.floor(tokens), 0}
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    return {0, 0, math.ceil((1 - tokens) / refill_rate * 1000)}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = self._redis.register_script(self._LUA_SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_after_ms = await self._script(
            keys=[f"ratelimit:{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"ratelimit:{key}")
