"""Prometheus metrics for feature gating and recommendations."""

from prometheus_client import Counter, Histogram

# Feature gate metrics
feature_decisions_total = Counter(
    "feature_decisions_total",
    "Feature access decisions",
    ["feature", "audience", "state"],
)

# Recommendation metrics
recommendation_latency_ms = Histogram(
    "recommendation_latency_ms",
    "Recommendation fetch latency in milliseconds",
    ["source", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000],
)

recommendation_errors_total = Counter(
    "recommendation_errors_total",
    "Total recommendation provider errors",
    ["reason"],
)

recommendation_cache_total = Counter(
    "recommendation_cache_total",
    "Recommendation cache lookups",
    ["outcome"],
)


class PrometheusRecommendationMetrics:
    """Prometheus-based recommendation metrics implementation."""

    def record_latency(self, source: str, outcome: str, latency_ms: float) -> None:
        """Record recommendation fetch latency."""
        recommendation_latency_ms.labels(source=source, outcome=outcome).observe(latency_ms)

    def inc_error(self, reason: str) -> None:
        """Increment error counter."""
        recommendation_errors_total.labels(reason=reason).inc()

    def inc_cache(self, outcome: str) -> None:
        """Increment cache lookup counter (hit, miss, shared)."""
        recommendation_cache_total.labels(outcome=outcome).inc()


def record_feature_decision(feature: str, audience: str, state: str) -> None:
    """Count one gate decision."""
    feature_decisions_total.labels(feature=feature, audience=audience, state=state).inc()
