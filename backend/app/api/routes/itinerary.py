"""Itinerary editing endpoints - activities within a saved trip's days."""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field

from backend.app.access.limits import ADD_TO_ITINERARY
from backend.app.api.dependencies import (
    ContextDep,
    GateDep,
    TripRepositoryDep,
    enforce_rate_limit,
    raise_for_decision,
)
from backend.app.api.routes.trips import load_trip, require_signed_in
from backend.app.db.context import RequestContext
from backend.app.db.repositories import TripNotFoundError, TripRepository
from backend.app.itinerary.mutator import (
    ActivityPatch,
    ItineraryEditError,
    add_activity,
    count_activities,
    day_position,
    delete_activity,
    move_activity,
    reorder_activity,
    update_activity,
)
from backend.app.models.common import CamelModel
from backend.app.models.trip import Activity, DayItinerary, Trip

router = APIRouter(
    prefix="/trips/{trip_id}/days/{day}",
    tags=["itinerary"],
    dependencies=[Depends(enforce_rate_limit)],
)


class ReorderRequest(CamelModel):
    """Request body for reordering an activity within a day."""

    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class MoveRequest(CamelModel):
    """Request body for moving an activity to another day."""

    activity_index: int = Field(..., ge=0)
    to_day: int = Field(..., ge=1)


async def _apply(
    trip: Trip, days: list[DayItinerary], repo: TripRepository, ctx: RequestContext
) -> list[DayItinerary]:
    try:
        stored = await repo.update_trip(trip.model_copy(update={"itinerary": days}), ctx)
    except TripNotFoundError as e:
        # Deleted between load and save
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found") from e
    return stored.itinerary


def _not_found(e: ItineraryEditError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/activities", response_model=list[DayItinerary], status_code=status.HTTP_201_CREATED)
async def create_activity(
    trip_id: str,
    day: int,
    activity: Activity,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> list[DayItinerary]:
    """Append an activity to a day.

    Raises:
        HTTPException: 404 if trip or day not found, 429 when the trip is full
    """
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    raise_for_decision(
        gate.check_collection_limit(ctx, ADD_TO_ITINERARY, count_activities(trip.itinerary))
    )

    try:
        days = add_activity(trip.itinerary, day_position(trip.itinerary, day), activity)
    except ItineraryEditError as e:
        raise _not_found(e) from e

    return await _apply(trip, days, repo, ctx)


@router.patch("/activities/{index}", response_model=list[DayItinerary])
async def patch_activity(
    trip_id: str,
    day: int,
    index: int,
    patch: ActivityPatch,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> list[DayItinerary]:
    """Merge fields into an activity."""
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    try:
        days = update_activity(trip.itinerary, day_position(trip.itinerary, day), index, patch)
    except ItineraryEditError as e:
        raise _not_found(e) from e

    return await _apply(trip, days, repo, ctx)


@router.delete("/activities/{index}", response_model=list[DayItinerary])
async def remove_activity(
    trip_id: str,
    day: int,
    index: int,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> list[DayItinerary]:
    """Remove an activity by position."""
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    try:
        days = delete_activity(trip.itinerary, day_position(trip.itinerary, day), index)
    except ItineraryEditError as e:
        raise _not_found(e) from e

    return await _apply(trip, days, repo, ctx)


@router.post("/reorder", response_model=list[DayItinerary])
async def reorder(
    trip_id: str,
    day: int,
    request: ReorderRequest,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> list[DayItinerary]:
    """Move an activity to a new position within the day."""
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    try:
        days = reorder_activity(
            trip.itinerary,
            day_position(trip.itinerary, day),
            request.from_index,
            request.to_index,
        )
    except ItineraryEditError as e:
        raise _not_found(e) from e

    return await _apply(trip, days, repo, ctx)


@router.post("/move", response_model=list[DayItinerary])
async def move(
    trip_id: str,
    day: int,
    request: MoveRequest,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> list[DayItinerary]:
    """Move an activity to the end of another day."""
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    try:
        days = move_activity(
            trip.itinerary,
            day_position(trip.itinerary, day),
            day_position(trip.itinerary, request.to_day),
            request.activity_index,
        )
    except ItineraryEditError as e:
        raise _not_found(e) from e

    return await _apply(trip, days, repo, ctx)
