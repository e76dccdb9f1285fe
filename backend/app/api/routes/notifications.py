"""Notification preference endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.api.dependencies import ContextDep, NotificationRepositoryDep, enforce_rate_limit
from backend.app.db.context import RequestContext
from backend.app.models.notifications import NotificationSettings

router = APIRouter(
    prefix="/notifications", tags=["notifications"], dependencies=[Depends(enforce_rate_limit)]
)


def _require_signed_in(ctx: RequestContext) -> None:
    if ctx.is_guest:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Sign in to manage notifications"
        )


@router.get("/settings", response_model=NotificationSettings)
async def get_notification_settings(
    ctx: ContextDep, repo: NotificationRepositoryDep
) -> NotificationSettings:
    """The caller's preferences, or the defaults if never saved."""
    _require_signed_in(ctx)
    return await repo.get_settings(ctx) or NotificationSettings()


@router.put("/settings", response_model=NotificationSettings)
async def update_notification_settings(
    settings: NotificationSettings, ctx: ContextDep, repo: NotificationRepositoryDep
) -> NotificationSettings:
    """Replace the caller's preferences. Omitted fields reset to their defaults.

    Raises:
        HTTPException: 403 for guests, 422 for negative reminder days
    """
    _require_signed_in(ctx)
    return await repo.save_settings(settings, ctx)
