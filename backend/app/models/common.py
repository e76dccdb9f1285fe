"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case and the SPA's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AccommodationType(str, Enum):
    """Accommodation tier chosen for the trip."""

    budget = "budget"
    midrange = "midrange"
    luxury = "luxury"


class TransportMode(str, Enum):
    """Preferred way of getting around."""

    public = "public"
    tuktuk = "tuktuk"
    private = "private"
    mix = "mix"


class TripStatus(str, Enum):
    """Trip lifecycle status."""

    draft = "draft"
    active = "active"
    planned = "planned"
    completed = "completed"


class ExpenseCategory(str, Enum):
    """Budget categories used by the allocator."""

    accommodation = "accommodation"
    food = "food"
    transportation = "transportation"
    activities = "activities"
    misc = "misc"


class Audience(str, Enum):
    """Who is asking: a signed-in user or an anonymous browser session."""

    guest = "guest"
    authenticated = "authenticated"
