"""Trip endpoints - saving, date-overlap checks and budget status."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import Field, ValidationError

from backend.app.access.gate import FeatureAccessGate
from backend.app.access.limits import ADD_TO_ITINERARY, SAVE_TRIP
from backend.app.api.dependencies import (
    ContextDep,
    GateDep,
    TripRepositoryDep,
    enforce_rate_limit,
    raise_for_decision,
)
from backend.app.budget.allocator import budget_alerts, calculate_budget_allocation, summarize_expenses
from backend.app.config import get_settings
from backend.app.db.context import RequestContext
from backend.app.db.repositories import DuplicateTripError, TripNotFoundError, TripRepository
from backend.app.itinerary.mutator import (
    ItineraryEditError,
    build_days,
    check_days_match,
    redate_days,
)
from backend.app.models.budget import BudgetAlert, BudgetAllocation, ExpenseSummary
from backend.app.models.common import AccommodationType, CamelModel, TransportMode, TripStatus
from backend.app.models.trip import (
    DayItinerary,
    SavedItem,
    Trip,
    TripBase,
    TripConflict,
    TripWindow,
    make_trip_id,
)
from backend.app.models.violations import Violation
from backend.app.verification.overlap import check_date_overlap
from backend.app.verification.verifiers import has_blocking, run_verifiers, verify_budget

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"], dependencies=[Depends(enforce_rate_limit)])


class TripCreate(TripBase):
    """Request body for POST /trips."""

    trip_id: str | None = None
    status: TripStatus = TripStatus.planned
    saved_items: list[SavedItem] = Field(default_factory=list)
    itinerary: list[DayItinerary] = Field(default_factory=list)
    local_trips: list[TripWindow] = Field(
        default_factory=list, description="Trip metadata not yet synced to the server"
    )


class TripUpdate(CamelModel):
    """Request body for PATCH /trips/{trip_id}; only set fields change."""

    destination: str | None = Field(None, min_length=1)
    start_date: date | None = None
    end_date: date | None = None
    budget: int | None = Field(None, ge=0)
    group_size: int | None = Field(None, ge=1)
    accommodation_type: AccommodationType | None = None
    transport_mode: TransportMode | None = None
    interests: list[str] | None = None
    status: TripStatus | None = None
    saved_items: list[SavedItem] | None = None
    itinerary: list[DayItinerary] | None = None
    local_trips: list[TripWindow] = Field(default_factory=list)


class TripSaveResponse(CamelModel):
    """Saved trip plus any advisory warnings."""

    trip: Trip
    violations: list[Violation] = Field(default_factory=list)


class DateCheckRequest(CamelModel):
    """Request body for POST /trips/check-dates. Dates may be malformed."""

    start_date: str | None = None
    end_date: str | None = None
    local_trips: list[TripWindow] = Field(default_factory=list)
    ignore_trip_id: str | None = None


class DateCheckResponse(CamelModel):
    """Result of a date-overlap check."""

    has_overlap: bool
    conflict: TripConflict | None = None
    message: str | None = None


class TripBudgetResponse(CamelModel):
    """Budget status of a saved trip."""

    allocation: BudgetAllocation
    summary: ExpenseSummary
    alerts: list[BudgetAlert]
    violations: list[Violation]


def _allocation_for(trip: Trip) -> BudgetAllocation:
    return calculate_budget_allocation(
        total_budget=trip.budget,
        duration=trip.duration,
        group_size=trip.group_size,
        interests=trip.interests,
        saved_items=trip.saved_items,
        destination=trip.destination,
        start_date=trip.start_date,
    )


def _unprocessable(e: ItineraryEditError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e))


def _check_saved_items(gate: FeatureAccessGate, ctx: RequestContext, trip: Trip) -> None:
    if not trip.saved_items:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="A trip needs at least one saved item before it can be saved",
        )
    raise_for_decision(
        gate.check_collection_limit(ctx, ADD_TO_ITINERARY, 0, adding=len(trip.saved_items))
    )


async def _verify(
    trip: Trip,
    repo: TripRepository,
    ctx: RequestContext,
    local_trips: list[TripWindow],
    ignore_trip_id: str | None = None,
) -> list[Violation]:
    """Run trip verifiers, raising 409 on a date overlap."""
    existing = [TripWindow.from_trip(t) for t in await repo.list_trips(ctx)]
    violations = run_verifiers(
        trip, _allocation_for(trip), existing, local_trips, ignore_trip_id=ignore_trip_id
    )

    if has_blocking(violations):
        blocking = violations[0]
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": blocking.message, "conflict": blocking.details},
        )

    return violations


async def load_trip(trip_id: str, repo: TripRepository, ctx: RequestContext) -> Trip:
    trip = await repo.get_trip(trip_id, ctx)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


def require_signed_in(gate: FeatureAccessGate, ctx: RequestContext) -> None:
    raise_for_decision(gate.can_use_feature(ctx, SAVE_TRIP))
    # Dev mode lets guests past the gate, but they still own no trips
    if ctx.is_guest:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Sign in to save your trips")


@router.post("/check-dates", response_model=DateCheckResponse)
async def check_dates(
    request: DateCheckRequest, ctx: ContextDep, repo: TripRepositoryDep
) -> DateCheckResponse:
    """Check candidate dates against the caller's trips.

    Guests have no saved trips, so only their local trips are checked.
    Unparseable dates never conflict.
    """
    existing: list[TripWindow] = []
    if not ctx.is_guest:
        existing = [TripWindow.from_trip(t) for t in await repo.list_trips(ctx)]

    conflict = check_date_overlap(
        request.start_date,
        request.end_date,
        existing,
        request.local_trips,
        ignore_trip_id=request.ignore_trip_id,
    )
    if conflict is None:
        return DateCheckResponse(has_overlap=False)

    return DateCheckResponse(
        has_overlap=True,
        conflict=conflict,
        message=(
            f"These dates overlap with your trip to {conflict.destination} "
            f"({conflict.start_date} to {conflict.end_date})."
        ),
    )


@router.get("", response_model=list[Trip])
async def list_trips(ctx: ContextDep, gate: GateDep, repo: TripRepositoryDep) -> list[Trip]:
    """List the caller's saved trips, most recently updated first."""
    require_signed_in(gate, ctx)
    return await repo.list_trips(ctx)


@router.post("", response_model=TripSaveResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    request: TripCreate, ctx: ContextDep, gate: GateDep, repo: TripRepositoryDep
) -> TripSaveResponse:
    """Save a trip.

    Raises:
        HTTPException: 403 for guests, 422 if the trip has no saved items or
            its itinerary does not fit its dates, 409 on a date overlap or duplicate trip ID, 429 when the
            active-trip cap is reached
    """
    require_signed_in(gate, ctx)

    if request.itinerary:
        try:
            check_days_match(request.itinerary, request.start_date, request.end_date)
        except ItineraryEditError as e:
            raise _unprocessable(e) from e

    trip = Trip(
        **request.model_dump(exclude={"trip_id", "itinerary", "local_trips"}),
        trip_id=request.trip_id or make_trip_id(request.destination, request.start_date),
        itinerary=request.itinerary or build_days(request.start_date, request.end_date),
    )
    _check_saved_items(gate, ctx, trip)

    existing = await repo.list_trips(ctx)
    active = sum(1 for t in existing if t.status != TripStatus.completed)
    raise_for_decision(gate.check_collection_limit(ctx, SAVE_TRIP, active))

    violations = await _verify(trip, repo, ctx, request.local_trips)

    try:
        stored = await repo.create_trip(trip, ctx)
    except DuplicateTripError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    logger.info(f"Trip saved: {stored.trip_id} ({len(stored.saved_items)} items)")
    return TripSaveResponse(trip=stored, violations=violations)


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, ctx: ContextDep, gate: GateDep, repo: TripRepositoryDep) -> Trip:
    """Get one saved trip."""
    require_signed_in(gate, ctx)
    return await load_trip(trip_id, repo, ctx)


@router.patch("/{trip_id}", response_model=TripSaveResponse)
async def update_trip(
    trip_id: str,
    request: TripUpdate,
    ctx: ContextDep,
    gate: GateDep,
    repo: TripRepositoryDep,
) -> TripSaveResponse:
    """Update fields of a saved trip, re-checking dates against other trips.

    Raises:
        HTTPException: 404 if not found, 422 if the result is invalid or
            empty, 409 on a date overlap
    """
    require_signed_in(gate, ctx)
    current = await load_trip(trip_id, repo, ctx)

    changes = request.model_dump(exclude_unset=True, exclude={"local_trips"})
    try:
        trip = Trip.model_validate({**current.model_dump(), **changes, "trip_id": trip_id})
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=e.errors(
                include_url=False, include_context=False, include_input=False
            ),
        ) from e

    # One day per date: a supplied itinerary must fit the dates, otherwise the
    # stored days follow the new dates
    try:
        if "itinerary" in changes:
            check_days_match(trip.itinerary, trip.start_date, trip.end_date)
        elif (trip.start_date, trip.end_date) != (current.start_date, current.end_date):
            trip = trip.model_copy(
                update={"itinerary": redate_days(trip.itinerary, trip.start_date, trip.end_date)}
            )
    except ItineraryEditError as e:
        raise _unprocessable(e) from e

    _check_saved_items(gate, ctx, trip)
    violations = await _verify(trip, repo, ctx, request.local_trips, ignore_trip_id=trip_id)

    try:
        stored = await repo.update_trip(trip, ctx)
    except TripNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found") from e

    return TripSaveResponse(trip=stored, violations=violations)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: str, ctx: ContextDep, gate: GateDep, repo: TripRepositoryDep
) -> Response:
    """Delete a saved trip."""
    require_signed_in(gate, ctx)
    if not await repo.delete_trip(trip_id, ctx):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{trip_id}/budget", response_model=TripBudgetResponse)
async def get_trip_budget(
    trip_id: str, ctx: ContextDep, gate: GateDep, repo: TripRepositoryDep
) -> TripBudgetResponse:
    """Allocation, tracked spend and alerts for a saved trip."""
    require_signed_in(gate, ctx)
    trip = await load_trip(trip_id, repo, ctx)

    allocation = _allocation_for(trip)
    summary = summarize_expenses(trip.budget, trip.saved_items)
    alerts = budget_alerts(
        trip.budget,
        {key: spend.spent for key, spend in summary.by_category.items()},
        allocation,
        currency=get_settings().currency,
    )

    return TripBudgetResponse(
        allocation=allocation,
        summary=summary,
        alerts=alerts,
        violations=verify_budget(allocation),
    )
