"""Date-overlap checking between a candidate trip and existing trips."""

import logging
from collections.abc import Iterable
from datetime import date, datetime

from backend.app.models.trip import TripConflict, TripWindow

logger = logging.getLogger(__name__)

DateLike = date | str | None


def parse_trip_date(value: DateLike) -> date | None:
    """Parse a trip date, returning None instead of raising.

    Accepts dates, datetimes and ISO strings (a time component is ignored).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive overlap: trips sharing a boundary day collide."""
    return start_a <= end_b and end_a >= start_b


def _find_conflict(
    new_start: date, new_end: date, trips: Iterable[TripWindow], ignore_trip_id: str | None
) -> TripConflict | None:
    for trip in trips:
        if ignore_trip_id is not None and trip.trip_id == ignore_trip_id:
            continue

        start = parse_trip_date(trip.start_date)
        end = parse_trip_date(trip.end_date)
        if start is None or end is None:
            logger.debug(f"Skipping trip with unparseable dates: {trip.destination!r}")
            continue

        if ranges_overlap(new_start, new_end, start, end):
            return TripConflict(
                destination=trip.destination,
                start_date=start,
                end_date=end,
                trip_id=trip.trip_id,
            )

    return None


def check_date_overlap(
    new_start: DateLike,
    new_end: DateLike,
    existing_trips: Iterable[TripWindow],
    local_trips: Iterable[TripWindow] = (),
    *,
    ignore_trip_id: str | None = None,
) -> TripConflict | None:
    """Find the first existing trip whose dates collide with a candidate range.

    Persisted trips are checked first, then local trip metadata that has not
    been synced yet. Local entries without saved items (ghost trips) are not
    real conflicts and are ignored. Malformed dates are skipped.

    Args:
        new_start: Candidate start date
        new_end: Candidate end date
        existing_trips: Trips already persisted
        local_trips: Unsynced local trip metadata
        ignore_trip_id: Trip being edited, excluded from its own check

    Returns:
        The conflicting trip, or None if the dates are free (or unparseable)
    """
    start = parse_trip_date(new_start)
    end = parse_trip_date(new_end)
    if start is None or end is None:
        return None

    conflict = _find_conflict(start, end, existing_trips, ignore_trip_id)
    if conflict is not None:
        return conflict

    real_local_trips = (trip for trip in local_trips if trip.saved_items)
    return _find_conflict(start, end, real_local_trips, ignore_trip_id)
