"""Trip models - trips, their saved items and day-by-day itinerary."""

import re
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from backend.app.models.common import (
    AccommodationType,
    CamelModel,
    Geo,
    TransportMode,
    TripStatus,
)


# AI responses may carry fractional amounts; negative ones are rejected
Amount = Annotated[int | float, Field(ge=0)]


class SavedItem(CamelModel):
    """A recommendation the user accepted into a trip.

    Items come straight from the AI response, so every field is optional and
    unknown fields are preserved.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    type: str | None = None
    category: str | None = None
    cost: Amount | None = None
    entry_fee: Amount | None = None
    estimated_cost: Amount | None = None
    location: str | None = None
    assigned_day: int | None = None
    trip_id: str | None = None

    @property
    def tracked_cost(self) -> int | float:
        """Cost used for budget tracking (cost, then entry fee, else 0)."""
        return self.cost or self.entry_fee or 0


class Activity(CamelModel):
    """Single activity on a day of the itinerary."""

    time: str = ""
    name: str
    description: str = ""
    location: str = ""
    coordinates: Geo | None = None
    duration: str = ""
    cost: int = Field(0, ge=0)
    currency: str = "LKR"
    category: str = "attraction"
    tips: str | None = None


class DayItinerary(CamelModel):
    """Itinerary for a single calendar day. Activity order is meaningful."""

    day: int = Field(..., ge=1)
    date: date
    title: str | None = None
    activities: list[Activity] = Field(default_factory=list)
    meals: dict[str, Any] | None = None
    transportation: dict[str, Any] | None = None
    daily_tips: list[str] | None = None


def make_trip_id(destination: str, start_date: date) -> str:
    """Derive the stable trip identifier, e.g. ``"kandy-2026-01-02"``."""
    slug = re.sub(r"\s+", "-", destination.strip().lower())
    return f"{slug}-{start_date.isoformat()}"


class TripBase(CamelModel):
    """Fields shared by trip creation and stored trips."""

    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    budget: int = Field(0, ge=0)
    group_size: int = Field(1, ge=1)
    accommodation_type: AccommodationType = AccommodationType.midrange
    transport_mode: TransportMode = TransportMode.tuktuk
    interests: list[str] = Field(default_factory=list)

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end >= start."""
        if "start_date" in info.data and v < info.data["start_date"]:
            raise ValueError("end_date must be >= start_date")
        return v

    @property
    def duration(self) -> int:
        """Number of days in [start_date, end_date), at least one."""
        return max(1, (self.end_date - self.start_date).days)


class Trip(TripBase):
    """A persisted trip."""

    trip_id: str
    status: TripStatus = TripStatus.planned
    saved_items: list[SavedItem] = Field(default_factory=list)
    itinerary: list[DayItinerary] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TripWindow(CamelModel):
    """Date range of an existing trip as seen by the overlap checker.

    Dates are kept loose so that local metadata with malformed values can be
    passed through and skipped rather than rejected.
    """

    destination: str = ""
    trip_id: str | None = None
    start_date: date | str | None = None
    end_date: date | str | None = None
    saved_items: list[Any] = Field(default_factory=list)

    @classmethod
    def from_trip(cls, trip: Trip) -> "TripWindow":
        """Build a window from a stored trip."""
        return cls(
            destination=trip.destination,
            trip_id=trip.trip_id,
            start_date=trip.start_date,
            end_date=trip.end_date,
            saved_items=list(trip.saved_items),
        )


class TripConflict(CamelModel):
    """The existing trip a candidate date range collides with."""

    destination: str
    start_date: date
    end_date: date
    trip_id: str | None = None


class Favorite(CamelModel):
    """A favorited attraction."""

    attraction_id: str = Field(..., min_length=1)
    name: str = ""
    category: str | None = None
    location: str | None = None
    image: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    added_at: datetime | None = None
