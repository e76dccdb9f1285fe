"""Per-minute request throttling by path bucket.

The AI endpoints and the CRUD endpoints are throttled independently, so a
burst of trip edits never eats into the recommendation allowance.
"""

import logging
from datetime import datetime, timezone

from backend.app.db.context import RequestContext
from backend.app.db.repositories import RateLimiter
from backend.app.ratelimit import make_rate_limit_key

logger = logging.getLogger(__name__)

AI_BUCKET = "ai"
CRUD_BUCKET = "crud"


class RateLimitMiddleware:
    """Routes a request path to its bucket and asks that bucket's limiter."""

    def __init__(self, limiters: dict[str, RateLimiter], bucket_map: dict[str, str]) -> None:
        """Initialize rate limit middleware.

        Args:
            limiters: Rate limiter per bucket name
            bucket_map: Path prefix to bucket name, checked in order
        """
        self._limiters = limiters
        self._bucket_map = bucket_map

    def bucket_for(self, path: str) -> str | None:
        return next(
            (bucket for prefix, bucket in self._bucket_map.items() if path.startswith(prefix)),
            None,
        )

    def check_rate_limit(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Count the request against its bucket.

        Returns:
            (allowed, retry_after_seconds); paths outside every bucket always pass
        """
        bucket = self.bucket_for(path)
        if bucket is None or bucket not in self._limiters:
            return (True, 0)

        key = make_rate_limit_key(ctx, bucket)
        retry_after = self._limiters[bucket].check_quota(key, now or datetime.now(timezone.utc))
        if retry_after is None:
            return (True, 0)

        logger.info(
            "Request throttled",
            extra={"structured": {"bucket": bucket, "path": path, "retry_after": retry_after.seconds}},
        )
        return (False, retry_after.seconds)


def create_default_bucket_map() -> dict[str, str]:
    """Recommendations and chat share the AI bucket; saved-data edits use the CRUD one."""
    return {
        "/recommendations": AI_BUCKET,
        "/trips": CRUD_BUCKET,
        "/favorites": CRUD_BUCKET,
        "/notifications": CRUD_BUCKET,
    }
