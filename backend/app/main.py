"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI

from backend.app.access.gate import FeatureAccessGate
from backend.app.access.limits import build_feature_limits
from backend.app.api.routes.access import router as access_router
from backend.app.api.routes.budget import router as budget_router
from backend.app.api.routes.favorites import router as favorites_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.itinerary import router as itinerary_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.notifications import router as notifications_router
from backend.app.api.routes.recommendations import router as recommendations_router
from backend.app.api.routes.trips import router as trips_router
from backend.app.config import Settings, get_settings
from backend.app.db.engine import dispose_engine
from backend.app.db.inmemory import (
    InMemoryFavoriteRepository,
    InMemoryNotificationSettingsRepository,
    InMemoryRateLimiter,
    InMemoryTripRepository,
    InMemoryUsageStore,
)
from backend.app.db.repositories import RateLimiter, UsageStore
from backend.app.middleware.ratelimit import (
    AI_BUCKET,
    CRUD_BUCKET,
    RateLimitMiddleware,
    create_default_bucket_map,
)
from backend.app.ratelimit import RedisRateLimiter, RedisUsageStore
from backend.app.recommendations.cache import RecommendationCache
from backend.app.recommendations.client import get_recommendation_client
from backend.app.recommendations.service import RecommendationService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)


def _build_counters(settings: Settings) -> tuple[UsageStore, dict[str, RateLimiter]]:
    """Usage store and per-bucket rate limiters, on Redis when configured."""
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        logger.info("Using Redis for usage counters and rate limits")
        return RedisUsageStore(client), {
            AI_BUCKET: RedisRateLimiter(client, settings.ai_requests_per_min),
            CRUD_BUCKET: RedisRateLimiter(client, settings.crud_ops_per_min),
        }

    logger.warning("No REDIS_URL configured, usage counters are per-process")
    return InMemoryUsageStore(), {
        AI_BUCKET: InMemoryRateLimiter(settings.ai_requests_per_min),
        CRUD_BUCKET: InMemoryRateLimiter(settings.crud_ops_per_min),
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release database connections on shutdown."""
    yield
    if app.state.settings.database_url:
        await dispose_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its shared state.

    Args:
        settings: Settings to use (defaults to environment settings)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="SerendibTrip API", version=VERSION, lifespan=lifespan)

    store, limiters = _build_counters(settings)
    if settings.dev_mode:
        logger.warning("DEV_MODE is on: every feature limit is bypassed")

    app.state.settings = settings
    app.state.gate = FeatureAccessGate(
        build_feature_limits(settings), store, dev_mode=settings.dev_mode
    )
    app.state.rate_limiter = RateLimitMiddleware(limiters, create_default_bucket_map())
    app.state.recommendations = RecommendationService(
        get_recommendation_client(),
        RecommendationCache(
            ttl_seconds=settings.recommendation_cache_ttl_seconds,
            max_entries=settings.recommendation_cache_max_entries,
        ),
    )

    # Without a database, saved data lives in process memory
    if settings.database_url:
        app.state.trip_repository = None
        app.state.favorite_repository = None
        app.state.notification_repository = None
    else:
        app.state.trip_repository = InMemoryTripRepository()
        app.state.favorite_repository = InMemoryFavoriteRepository()
        app.state.notification_repository = InMemoryNotificationSettingsRepository()

    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(access_router)
    app.include_router(budget_router)
    app.include_router(trips_router)
    app.include_router(itinerary_router)
    app.include_router(favorites_router)
    app.include_router(notifications_router)
    app.include_router(recommendations_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "SerendibTrip API", "version": VERSION}

    return app


app = create_app()
