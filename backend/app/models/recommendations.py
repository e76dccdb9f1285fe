"""Recommendation models - request/response contract with the AI provider."""

from typing import Any, Literal

from pydantic import ConfigDict, Field

from backend.app.models.common import AccommodationType, CamelModel, TransportMode


class RecommendationRequest(CamelModel):
    """Trip parameters sent to the recommendation provider."""

    destination: str = Field(..., min_length=1)
    interests: list[str] = Field(default_factory=list)
    budget: int = Field(..., gt=0)
    duration: int = Field(..., ge=1)
    group_size: int = Field(2, ge=1)
    start_date: str | None = None
    end_date: str | None = None
    accommodation_type: AccommodationType = AccommodationType.midrange
    transport_mode: TransportMode = TransportMode.tuktuk
    exclude: list[str] = Field(default_factory=list, description="Names already saved")


class RecommendationResponse(CamelModel):
    """Structured recommendations. Items are opaque provider JSON."""

    model_config = ConfigDict(extra="allow")

    top_attractions: list[dict[str, Any]] = Field(default_factory=list)
    recommended_restaurants: list[dict[str, Any]] = Field(default_factory=list)
    recommended_accommodations: list[dict[str, Any]] = Field(default_factory=list)
    transport_estimate: dict[str, Any] | None = None
    budget_breakdown: dict[str, Any] | None = None
    trip_summary: Any = None
    source: Literal["openai", "stub"] = "stub"
    from_cache: bool = False


class ChatMessage(CamelModel):
    """One turn of a chat conversation."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    """Message for the AI travel concierge."""

    message: str = Field(..., min_length=1)
    conversation_history: list[ChatMessage] = Field(default_factory=list)
    user_context: dict[str, Any] | None = None


class ChatResponse(CamelModel):
    """Concierge reply."""

    reply: str
    source: Literal["openai", "stub"] = "stub"


class PackingListRequest(CamelModel):
    """Trip details for a generated packing list."""

    destination: str = Field(..., min_length=1)
    duration: int = Field(3, ge=1)
    activities: list[str] = Field(default_factory=list)
    weather: dict[str, Any] | None = None
    group_size: int = Field(1, ge=1)
    trip_id: str | None = Field(None, description="Saved trip the list is for")


class PackingItem(CamelModel):
    name: str
    quantity: int = Field(1, ge=1)


class PackingCategory(CamelModel):
    """Items under one heading, e.g. clothing or documents."""

    name: str
    items: list[PackingItem | str] = Field(default_factory=list)


class PackingList(CamelModel):
    categories: list[PackingCategory] = Field(default_factory=list)
    weather_tip: str | None = None
    tips: list[str] = Field(default_factory=list)


class PackingListResponse(CamelModel):
    """Generated packing list plus the regenerations left for the trip."""

    packing_list: PackingList
    source: Literal["openai", "stub"] = "stub"
    remaining: int | None = None
