"""Favorite attraction endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from backend.app.access.gate import FeatureAccessGate
from backend.app.access.limits import FAVORITES
from backend.app.api.dependencies import (
    ContextDep,
    FavoriteRepositoryDep,
    GateDep,
    enforce_rate_limit,
    raise_for_decision,
)
from backend.app.db.context import RequestContext
from backend.app.db.repositories import DuplicateFavoriteError
from backend.app.models.trip import Favorite

router = APIRouter(prefix="/favorites", tags=["favorites"], dependencies=[Depends(enforce_rate_limit)])


def _require_signed_in(gate: FeatureAccessGate, ctx: RequestContext) -> None:
    raise_for_decision(gate.can_use_feature(ctx, FAVORITES))
    if ctx.is_guest:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Sign in to save favorites")


@router.get("", response_model=list[Favorite])
async def list_favorites(
    ctx: ContextDep, gate: GateDep, repo: FavoriteRepositoryDep
) -> list[Favorite]:
    """List the caller's favorites in the order they were added."""
    _require_signed_in(gate, ctx)
    return await repo.list_favorites(ctx)


@router.post("", response_model=Favorite, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    favorite: Favorite, ctx: ContextDep, gate: GateDep, repo: FavoriteRepositoryDep
) -> Favorite:
    """Add an attraction to favorites.

    Raises:
        HTTPException: 403 for guests, 400 if already a favorite, 429 when
            the favorites cap is reached
    """
    _require_signed_in(gate, ctx)

    current = await repo.list_favorites(ctx)
    raise_for_decision(gate.check_collection_limit(ctx, FAVORITES, len(current)))

    try:
        return await repo.add_favorite(favorite, ctx)
    except DuplicateFavoriteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/{attraction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    attraction_id: str, ctx: ContextDep, gate: GateDep, repo: FavoriteRepositoryDep
) -> Response:
    """Remove an attraction from favorites."""
    _require_signed_in(gate, ctx)
    if not await repo.remove_favorite(attraction_id, ctx):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
