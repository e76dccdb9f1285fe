"""Recommendation lookup with caching and single-flight fetches."""

import asyncio
import logging
import time

from backend.app.models.recommendations import (
    ChatRequest,
    ChatResponse,
    PackingListRequest,
    PackingListResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from backend.app.recommendations.blacklist import filter_blacklisted
from backend.app.recommendations.cache import RecommendationCache, make_cache_key
from backend.app.recommendations.client import RecommendationClient
from backend.app.utils.logging import StructuredRecommendationLogger
from backend.app.utils.metrics import PrometheusRecommendationMetrics

logger = logging.getLogger(__name__)


class RecommendationService:
    """Serves recommendations from cache or the provider.

    Concurrent identical requests share one in-flight provider call. A
    waiter that is cancelled does not cancel the shared call, whose result
    is still cached for the others.
    """

    def __init__(
        self,
        client: RecommendationClient,
        cache: RecommendationCache,
        metrics: PrometheusRecommendationMetrics | None = None,
        struct_logger: StructuredRecommendationLogger | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._metrics = metrics or PrometheusRecommendationMetrics()
        self._log = struct_logger or StructuredRecommendationLogger()
        self._inflight: dict[str, asyncio.Task[RecommendationResponse]] = {}

    @property
    def cache(self) -> RecommendationCache:
        return self._cache

    def peek(self, request: RecommendationRequest) -> RecommendationResponse | None:
        """Cached response for the request, without calling the provider."""
        cached = self._cache.get(make_cache_key(request))
        if cached is None:
            return None
        cached.from_cache = True
        return cached

    async def get_recommendations(
        self, request: RecommendationRequest, force_refresh: bool = False
    ) -> RecommendationResponse:
        """Get recommendations for a trip.

        Args:
            request: Trip parameters
            force_refresh: Skip the cache lookup (the fresh result is still cached)

        Returns:
            RecommendationResponse, with ``from_cache`` set on cache hits
        """
        key = make_cache_key(request)
        start = time.perf_counter()

        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                self._metrics.inc_cache("hit")
                self._log.log_fetch(
                    key, request.destination, "cache_hit", (time.perf_counter() - start) * 1000
                )
                cached.from_cache = True
                return cached
            self._metrics.inc_cache("miss")

        task = self._inflight.get(key)
        if task is not None:
            self._metrics.inc_cache("shared")
            self._log.log_fetch(
                key, request.destination, "shared", (time.perf_counter() - start) * 1000
            )
        else:
            task = asyncio.create_task(self._fetch(key, request))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._finish(key, t))

        response = await asyncio.shield(task)
        return response.model_copy(deep=True)

    def _finish(self, key: str, task: asyncio.Task[RecommendationResponse]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the exception retrieved when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _fetch(self, key: str, request: RecommendationRequest) -> RecommendationResponse:
        start = time.perf_counter()
        try:
            response = await self._client.recommend(request)
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self._metrics.inc_error(type(e).__name__)
            self._metrics.record_latency("unknown", "error", latency_ms)
            self._log.log_fetch(
                key, request.destination, "error", latency_ms, error_reason=str(e)
            )
            raise

        latency_ms = (time.perf_counter() - start) * 1000
        response.from_cache = False
        response.top_attractions = filter_blacklisted(response.top_attractions)
        response.recommended_restaurants = filter_blacklisted(response.recommended_restaurants)
        response.recommended_accommodations = filter_blacklisted(response.recommended_accommodations)
        self._cache.set(key, response)
        self._metrics.record_latency(response.source, "success", latency_ms)
        self._log.log_fetch(key, request.destination, "fetched", latency_ms, source=response.source)
        return response

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Forward a chat message to the provider."""
        return await self._client.chat(request)

    async def packing_list(self, request: PackingListRequest) -> PackingListResponse:
        """Generate a packing list. Lists are per trip and never cached."""
        response = await self._client.packing_list(request)
        logger.info(
            "Packing list generated",
            extra={"structured": {"destination": request.destination, "source": response.source}},
        )
        return response
