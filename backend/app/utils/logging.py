"""Structured logging for recommendation requests."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredRecommendationLogger:
    """Structured logger for recommendation fetches."""

    def log_fetch(
        self,
        cache_key: str,
        destination: str,
        outcome: str,
        latency_ms: float,
        source: str | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a recommendation lookup with structured data."""
        log_data: dict[str, Any] = {
            "cache_key": cache_key,
            "destination": destination,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if source:
            log_data["source"] = source
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Recommendations: {destination} - {outcome}"

        if outcome in ("fetched", "cache_hit", "shared"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
