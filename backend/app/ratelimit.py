"""Redis-backed counters for rate limiting and feature usage."""

from datetime import datetime

import redis

from backend.app.db.context import RequestContext
from backend.app.db.repositories import RetryAfter
from backend.app.models.access import QuotaScope

# Daily counters outlive the day they count; guest session counters live a week.
DAILY_COUNTER_TTL_SECONDS = 2 * 24 * 60 * 60
SESSION_COUNTER_TTL_SECONDS = 7 * 24 * 60 * 60
TRIP_COUNTER_TTL_SECONDS = 365 * 24 * 60 * 60

# Decrement only an existing positive counter, so a release never creates a
# key (without TTL) or drives a count below zero.
DECREMENT_FLOORED = """
local value = tonumber(redis.call("GET", KEYS[1]) or "0")
if value <= 0 then
    return 0
end
return redis.call("DECR", KEYS[1])
"""


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Create rate limit key from context and bucket.

    Args:
        ctx: Request context
        bucket: Bucket name (e.g., "ai", "crud")

    Returns:
        Rate limit key
    """
    subject = f"user:{ctx.user_id}" if ctx.user_id else f"guest:{ctx.session_id}"
    return f"{subject}:{bucket}"


class RedisRateLimiter:
    """Redis-based rate limiter using INCR + EXPIRE pattern."""

    def __init__(self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            redis_client: Redis client
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        window_start = int(now.timestamp() / self._window_seconds) * self._window_seconds
        redis_key = f"ratelimit:{key}:{window_start}"

        count = self._redis.incr(redis_key)
        if count == 1:
            self._redis.expire(redis_key, self._window_seconds)

        if count > self._max_requests:
            ttl = self._redis.ttl(redis_key)
            return RetryAfter(seconds=max(1, ttl))

        return None


class RedisUsageStore:
    """Redis implementation of UsageStore.

    The scope is part of the Redis key, so a new UTC day starts a fresh
    counter and old ones simply expire.
    """

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client
        self._decrement = redis_client.register_script(DECREMENT_FLOORED)

    @staticmethod
    def _redis_key(key: str, scope: str) -> str:
        return f"usage:{key}:{scope}"

    @staticmethod
    def _ttl(scope: str) -> int:
        if scope == QuotaScope.SESSION.value:
            return SESSION_COUNTER_TTL_SECONDS
        if scope == QuotaScope.TRIP.value:
            return TRIP_COUNTER_TTL_SECONDS
        return DAILY_COUNTER_TTL_SECONDS

    def get(self, key: str, scope: str) -> int:
        """Current count for the key in this scope."""
        value = self._redis.get(self._redis_key(key, scope))
        return int(value) if value is not None else 0

    def increment(self, key: str, scope: str) -> int:
        """Atomically increment and return the new count."""
        redis_key = self._redis_key(key, scope)
        count = self._redis.incr(redis_key)
        if count == 1:
            self._redis.expire(redis_key, self._ttl(scope))
        return int(count)

    def decrement(self, key: str, scope: str) -> int:
        """Atomically decrement (not below 0) and return the new count."""
        count = self._decrement(keys=[self._redis_key(key, scope)])
        return int(count)
