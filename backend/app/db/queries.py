"""Ownership-safe query helpers."""

import uuid

from sqlalchemy import Select, select

from backend.app.db.context import RequestContext
from backend.app.db.models import FavoriteRecord, TripRecord


def require_user(ctx: RequestContext) -> uuid.UUID:
    """User ID of the caller; guests have no saved data."""
    if ctx.user_id is None:
        raise PermissionError("Guests cannot access saved data")
    return ctx.user_id


def select_trips(ctx: RequestContext) -> Select[tuple[TripRecord]]:
    """Select trip rows with user scoping enforced.

    Args:
        ctx: Request context with user_id

    Returns:
        Select filtered by user_id
    """
    return select(TripRecord).where(TripRecord.user_id == require_user(ctx))


def select_favorites(ctx: RequestContext) -> Select[tuple[FavoriteRecord]]:
    """Select favorite rows with user scoping enforced.

    Args:
        ctx: Request context with user_id

    Returns:
        Select filtered by user_id
    """
    return select(FavoriteRecord).where(FavoriteRecord.user_id == require_user(ctx))
