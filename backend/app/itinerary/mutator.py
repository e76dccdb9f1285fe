"""Edits over the Day -> Activity itinerary tree.

Every operation returns a new list of days and leaves its inputs untouched,
so callers can keep the previous tree for undo or diffing.
"""

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

from pydantic import Field

from backend.app.models.common import CamelModel, Geo
from backend.app.models.trip import Activity, DayItinerary


class ItineraryEditError(ValueError):
    """Day or activity index is out of range."""


class ActivityPatch(CamelModel):
    """Partial update of an activity; only set fields are merged."""

    time: str | None = None
    name: str | None = None
    description: str | None = None
    location: str | None = None
    coordinates: Geo | None = None
    duration: str | None = None
    cost: int | None = Field(None, ge=0)
    currency: str | None = None
    category: str | None = None
    tips: str | None = None


def _check_day(days: Sequence[DayItinerary], day_index: int) -> None:
    if not 0 <= day_index < len(days):
        raise ItineraryEditError(f"Day index {day_index} out of range (0..{len(days) - 1})")


def _check_activity(day: DayItinerary, activity_index: int) -> None:
    if not 0 <= activity_index < len(day.activities):
        raise ItineraryEditError(
            f"Activity index {activity_index} out of range for day {day.day}"
        )


def _replace_day(
    days: Sequence[DayItinerary], day_index: int, activities: list[Activity]
) -> list[DayItinerary]:
    updated = list(days)
    updated[day_index] = days[day_index].model_copy(update={"activities": activities})
    return updated


def day_position(days: Sequence[DayItinerary], day_number: int) -> int:
    """List index of the day with the given 1-based ordinal."""
    for index, day in enumerate(days):
        if day.day == day_number:
            return index
    raise ItineraryEditError(f"Day {day_number} is not part of this itinerary")


def add_activity(
    days: Sequence[DayItinerary], day_index: int, activity: Activity
) -> list[DayItinerary]:
    """Append an activity to the end of a day."""
    _check_day(days, day_index)
    return _replace_day(days, day_index, [*days[day_index].activities, activity])


def update_activity(
    days: Sequence[DayItinerary],
    day_index: int,
    activity_index: int,
    patch: ActivityPatch | dict[str, Any],
) -> list[DayItinerary]:
    """Merge the set, non-null fields of ``patch`` into one activity."""
    _check_day(days, day_index)
    day = days[day_index]
    _check_activity(day, activity_index)

    if isinstance(patch, dict):
        patch = ActivityPatch.model_validate(patch)

    current = day.activities[activity_index]
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    merged = Activity.model_validate({**current.model_dump(), **changes})

    activities = list(day.activities)
    activities[activity_index] = merged
    return _replace_day(days, day_index, activities)


def delete_activity(
    days: Sequence[DayItinerary], day_index: int, activity_index: int
) -> list[DayItinerary]:
    """Remove an activity by position."""
    _check_day(days, day_index)
    day = days[day_index]
    _check_activity(day, activity_index)

    activities = [a for i, a in enumerate(day.activities) if i != activity_index]
    return _replace_day(days, day_index, activities)


def reorder_activity(
    days: Sequence[DayItinerary], day_index: int, from_index: int, to_index: int
) -> list[DayItinerary]:
    """Move an activity within a day (remove at ``from_index``, insert at ``to_index``).

    Moving 0 -> 2 and then 2 -> 0 restores the original order.
    """
    _check_day(days, day_index)
    day = days[day_index]
    _check_activity(day, from_index)
    _check_activity(day, to_index)

    activities = list(day.activities)
    moved = activities.pop(from_index)
    activities.insert(to_index, moved)
    return _replace_day(days, day_index, activities)


def move_activity(
    days: Sequence[DayItinerary], from_day: int, to_day: int, activity_index: int
) -> list[DayItinerary]:
    """Move an activity to the end of another day."""
    _check_day(days, from_day)
    _check_day(days, to_day)
    source = days[from_day]
    _check_activity(source, activity_index)

    if from_day == to_day:
        return reorder_activity(days, from_day, activity_index, len(source.activities) - 1)

    moved = source.activities[activity_index]
    updated = _replace_day(
        days, from_day, [a for i, a in enumerate(source.activities) if i != activity_index]
    )
    return _replace_day(updated, to_day, [*days[to_day].activities, moved])


def build_days(start: date, end: date) -> list[DayItinerary]:
    """Empty itinerary with one day per date in [start, end), at least one."""
    count = max(1, (end - start).days)
    return [
        DayItinerary(day=n + 1, date=start + timedelta(days=n), title=f"Day {n + 1}")
        for n in range(count)
    ]


def count_activities(days: Sequence[DayItinerary]) -> int:
    """Total number of activities across all days."""
    return sum(len(day.activities) for day in days)


def check_days_match(days: Sequence[DayItinerary], start: date, end: date) -> None:
    """Require exactly one day per date in [start, end), numbered from 1.

    Raises:
        ItineraryEditError: If the days do not line up with the trip dates
    """
    expected = [(d.day, d.date) for d in build_days(start, end)]
    if [(d.day, d.date) for d in days] != expected:
        raise ItineraryEditError(
            f"Itinerary must have one day per date from {start} to {end}, numbered from 1"
        )


def redate_days(days: Sequence[DayItinerary], start: date, end: date) -> list[DayItinerary]:
    """Lay an existing itinerary over new trip dates.

    Each day keeps its plan by ordinal and takes the date of its new slot.
    New slots start empty; days past the end of the range are dropped.

    Raises:
        ItineraryEditError: If a day that would be dropped still has activities
    """
    slots = build_days(start, end)
    by_ordinal = {day.day: day for day in days}

    for day in days:
        if day.day > len(slots) and day.activities:
            raise ItineraryEditError(
                f"Day {day.day} still has activities but is outside {start} to {end}"
            )

    return [
        by_ordinal[slot.day].model_copy(update={"date": slot.date})
        if slot.day in by_ordinal
        else slot
        for slot in slots
    ]
