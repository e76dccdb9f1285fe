"""FastAPI dependencies for services held on application state."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from backend.app.access.gate import FeatureAccessGate
from backend.app.api.auth import get_current_context
from backend.app.db.context import RequestContext
from backend.app.db.engine import get_session
from backend.app.db.repositories import (
    FavoriteRepository,
    NotificationSettingsRepository,
    TripRepository,
)
from backend.app.db.sql_repositories import (
    SqlFavoriteRepository,
    SqlNotificationSettingsRepository,
    SqlTripRepository,
)
from backend.app.middleware.ratelimit import RateLimitMiddleware
from backend.app.models.access import AccessState, FeatureDecision
from backend.app.recommendations.service import RecommendationService


def get_gate(request: Request) -> FeatureAccessGate:
    """Feature-access gate for this app."""
    return request.app.state.gate


def get_recommendation_service(request: Request) -> RecommendationService:
    """Recommendation service (and its cache) for this app."""
    return request.app.state.recommendations


async def get_trip_repository(request: Request) -> AsyncGenerator[TripRepository, None]:
    """Trip repository: the app's in-memory one, or SQL over a fresh session."""
    repository = getattr(request.app.state, "trip_repository", None)
    if repository is not None:
        yield repository
        return

    async for session in get_session():
        yield SqlTripRepository(session)


async def get_favorite_repository(
    request: Request,
) -> AsyncGenerator[FavoriteRepository, None]:
    """Favorite repository: the app's in-memory one, or SQL over a fresh session."""
    repository = getattr(request.app.state, "favorite_repository", None)
    if repository is not None:
        yield repository
        return

    async for session in get_session():
        yield SqlFavoriteRepository(session)


async def get_notification_repository(
    request: Request,
) -> AsyncGenerator[NotificationSettingsRepository, None]:
    """Notification settings repository: in-memory, or SQL over a fresh session."""
    repository = getattr(request.app.state, "notification_repository", None)
    if repository is not None:
        yield repository
        return

    async for session in get_session():
        yield SqlNotificationSettingsRepository(session)


async def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> None:
    """Reject the request with 429 when the caller's bucket is exhausted."""
    limiter: RateLimitMiddleware | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return

    allowed, retry_after = limiter.check_rate_limit(request.url.path, ctx)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down.",
            headers={"Retry-After": str(retry_after)},
        )


def raise_for_decision(decision: FeatureDecision) -> None:
    """Translate a denied gate decision into an HTTP error.

    Raises:
        HTTPException: 403 if the feature is disabled, 429 if its quota is used up
    """
    if decision.allowed:
        return

    status_code = (
        status.HTTP_429_TOO_MANY_REQUESTS
        if decision.state == AccessState.DENIED_QUOTA_EXHAUSTED
        else status.HTTP_403_FORBIDDEN
    )
    raise HTTPException(
        status_code=status_code,
        detail=decision.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


ContextDep = Annotated[RequestContext, Depends(get_current_context)]
GateDep = Annotated[FeatureAccessGate, Depends(get_gate)]
TripRepositoryDep = Annotated[TripRepository, Depends(get_trip_repository)]
FavoriteRepositoryDep = Annotated[FavoriteRepository, Depends(get_favorite_repository)]
NotificationRepositoryDep = Annotated[
    NotificationSettingsRepository, Depends(get_notification_repository)
]
RecommendationServiceDep = Annotated[RecommendationService, Depends(get_recommendation_service)]
