"""AI recommendation provider with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides deterministic fallback when no key present for testing.
"""

import json
import logging
from typing import Any, Protocol

from openai import AsyncOpenAI

from backend.app.budget.allocator import calculate_budget_allocation
from backend.app.config import get_settings
from backend.app.models.recommendations import (
    ChatRequest,
    ChatResponse,
    PackingCategory,
    PackingItem,
    PackingList,
    PackingListRequest,
    PackingListResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from backend.app.pricing.table import KNOWN_PRICES

logger = logging.getLogger(__name__)

# Nightly accommodation cost per tier (LKR)
ACCOMMODATION_COSTS: dict[str, dict[str, int]] = {
    "budget": {"min": 5000, "max": 15000, "avg": 10000},
    "midrange": {"min": 15000, "max": 55000, "avg": 35000},
    "luxury": {"min": 55000, "max": 300000, "avg": 150000},
}

# Daily transport cost per mode (LKR)
TRANSPORT_COSTS: dict[str, dict[str, int]] = {
    "public": {"min": 500, "max": 2000, "avg": 1000},
    "tuktuk": {"min": 2000, "max": 5000, "avg": 3500},
    "private": {"min": 8000, "max": 15000, "avg": 12000},
    "mix": {"min": 1500, "max": 4000, "avg": 2500},
}

STUB_RESTAURANTS: list[dict[str, Any]] = [
    {"name": "Rice & Curry House", "cuisine": "Sri Lankan", "cost": 1500},
    {"name": "Kottu Corner", "cuisine": "Street food", "cost": 800},
    {"name": "Hoppers Cafe", "cuisine": "Sri Lankan breakfast", "cost": 600},
    {"name": "Seafood Grill", "cuisine": "Seafood", "cost": 3500},
]

# Extra items per activity keyword: (category, item)
ACTIVITY_PACKING: dict[str, list[tuple[str, str]]] = {
    "beach": [("clothing", "Swimwear"), ("accessories", "Beach towel"), ("toiletries", "Reef-safe sunscreen")],
    "surf": [("clothing", "Rash guard"), ("toiletries", "Reef-safe sunscreen")],
    "hiking": [("footwear", "Hiking shoes"), ("essentials", "Refillable water bottle")],
    "wildlife": [("accessories", "Binoculars"), ("clothing", "Neutral-coloured long sleeves")],
    "safari": [("accessories", "Binoculars"), ("clothing", "Neutral-coloured long sleeves")],
    "culture": [("clothing", "Sarong or scarf to cover shoulders and knees"), ("footwear", "Slip-on sandals")],
    "temple": [("clothing", "Sarong or scarf to cover shoulders and knees"), ("footwear", "Slip-on sandals")],
    "tea": [("clothing", "Light fleece for the hill country")],
}

PACKING_TIPS = [
    "Remove shoes and hats before entering temples.",
    "Carry small LKR notes for tuk-tuks and entrance fees.",
    "Pack a power adapter for Type D and G sockets.",
]


class RecommendationClient(Protocol):
    """Protocol for recommendation provider implementations."""

    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        """Generate structured recommendations for a trip.

        Args:
            request: Trip parameters, including names to exclude

        Returns:
            RecommendationResponse with attractions, restaurants and estimates
        """
        ...

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Answer a travel question."""
        ...

    async def packing_list(self, request: PackingListRequest) -> PackingListResponse:
        """Generate a packing list for a trip."""
        ...


def _excluded(name: str, exclude: set[str]) -> bool:
    return name.lower() in exclude


class DeterministicStubClient:
    """Deterministic stub client for testing (no API key required)."""

    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        """Build recommendations from the known-price catalogue."""
        exclude = {name.lower().strip() for name in request.exclude}

        attractions: list[dict[str, Any]] = []
        seen: set[str] = set()
        for entry in KNOWN_PRICES.values():
            name = entry.get("name")
            if not name or "exact" not in entry or name in seen:
                continue
            seen.add(name)
            if _excluded(name, exclude):
                continue
            attractions.append(
                {"name": name, "type": "attraction", "cost": entry["exact"], "isEstimate": False}
            )

        restaurants = [
            {**r, "type": "restaurant", "location": request.destination}
            for r in STUB_RESTAURANTS
            if not _excluded(r["name"], exclude)
        ]

        accom = ACCOMMODATION_COSTS[request.accommodation_type.value]
        transport = TRANSPORT_COSTS[request.transport_mode.value]

        allocation = calculate_budget_allocation(
            total_budget=request.budget,
            duration=request.duration,
            group_size=request.group_size,
            interests=request.interests,
        )

        return RecommendationResponse(
            top_attractions=attractions[: min(request.duration * 6, 30)],
            recommended_restaurants=restaurants[: min(request.duration * 3, 15)],
            recommended_accommodations=[
                {
                    "name": f"{request.destination} {request.accommodation_type.value.title()} Stay",
                    "type": "accommodation",
                    "pricePerNight": accom["avg"],
                    "priceRange": {"min": accom["min"], "max": accom["max"]},
                }
            ],
            transport_estimate={
                "mode": request.transport_mode.value,
                "perDay": transport["avg"],
                "total": transport["avg"] * request.duration,
            },
            budget_breakdown={key.value: cat.total for key, cat in allocation.categories.items()},
            trip_summary=(
                f"{request.duration}-day trip to {request.destination} for "
                f"{request.group_size} (stub recommendations)"
            ),
            source="stub",
        )

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Generate deterministic stub reply."""
        return ChatResponse(
            reply=(
                f"Thanks for your question about \"{request.message[:80]}\". "
                "AI chat is not configured, so this is a placeholder answer."
            ),
            source="stub",
        )

    async def packing_list(self, request: PackingListRequest) -> PackingListResponse:
        """Build a packing list from the trip length, activities and weather."""
        changes = min(request.duration, 7)
        items: dict[str, list[PackingItem | str]] = {
            "clothing": [
                PackingItem(name="Breathable cotton T-shirts", quantity=changes),
                PackingItem(name="Light trousers or shorts", quantity=max(1, changes // 2)),
                PackingItem(name="Underwear", quantity=changes),
            ],
            "toiletries": [
                PackingItem(name="Sunscreen SPF 50", quantity=request.group_size),
                PackingItem(name="Insect repellent", quantity=request.group_size),
                "Toothbrush and toothpaste",
            ],
            "electronics": ["Phone charger", "Power bank", "Universal travel adapter"],
            "documents": ["Passport", "Sri Lanka ETA confirmation", "Travel insurance details"],
            "accessories": ["Sunglasses", "Sun hat", "Daypack"],
            "footwear": ["Comfortable walking sandals"],
            "essentials": ["Basic first-aid kit", "Hand sanitiser", "Reusable water bottle"],
        }

        activities = " ".join(request.activities).lower()
        for keyword, extras in ACTIVITY_PACKING.items():
            if keyword not in activities:
                continue
            for category, name in extras:
                if name not in items[category]:
                    items[category].append(name)

        weather_tip = None
        if request.weather:
            forecast = json.dumps(request.weather).lower()
            if "rain" in forecast or "shower" in forecast or "storm" in forecast:
                items["weather"] = ["Compact umbrella", "Light rain jacket", "Dry bag for electronics"]
                weather_tip = "Showers are likely, so keep a rain layer in your daypack."
            else:
                weather_tip = "Expect heat and humidity; pack light, loose layers."

        return PackingListResponse(
            packing_list=PackingList(
                categories=[PackingCategory(name=name, items=entries) for name, entries in items.items()],
                weather_tip=weather_tip,
                tips=list(PACKING_TIPS),
            ),
            source="stub",
        )


class OpenAIRecommendationClient:
    """OpenAI-backed recommendation client."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self._fallback = DeterministicStubClient()

    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        """Generate recommendations using the OpenAI API."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt()},
                    {"role": "user", "content": self._build_prompt(request)},
                ],
                response_format={"type": "json_object"},
                temperature=0.7,
                max_tokens=4000,
            )

            content = response.choices[0].message.content or ""
            if not content.strip():
                logger.warning("OpenAI returned empty response, using deterministic stub fallback")
                return await self._fallback.recommend(request)

            payload = json.loads(content)
            result = RecommendationResponse.model_validate(payload)
            result.source = "openai"
            result.from_cache = False
            return result

        except Exception as e:
            logger.error(f"OpenAI recommendation call failed: {e}")
            logger.warning("Falling back to deterministic stub client for recommendations")
            return await self._fallback.recommend(request)

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Answer a travel question using the OpenAI API."""
        messages: list[dict[str, str]] = [
            {
                "role": "system",
                "content": (
                    "You are a friendly Sri Lanka travel concierge. Answer briefly and "
                    "quote prices in LKR."
                ),
            }
        ]
        if request.user_context:
            messages.append(
                {"role": "system", "content": f"Traveller context: {json.dumps(request.user_context)}"}
            )
        # Keep the last few turns for context size
        messages.extend(
            {"role": m.role, "content": m.content} for m in request.conversation_history[-10:]
        )
        messages.append({"role": "user", "content": request.message})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.7,
                max_tokens=800,
            )
            reply = response.choices[0].message.content or ""
            if not reply.strip():
                logger.warning("OpenAI returned empty chat reply, using deterministic stub fallback")
                return await self._fallback.chat(request)
            return ChatResponse(reply=reply, source="openai")

        except Exception as e:
            logger.error(f"OpenAI chat call failed: {e}")
            logger.warning("Falling back to deterministic stub client for chat")
            return await self._fallback.chat(request)

    async def packing_list(self, request: PackingListRequest) -> PackingListResponse:
        """Generate a packing list using the OpenAI API."""
        prompt = "\n".join(
            [
                f"Packing list for {request.duration} days in {request.destination}, Sri Lanka.",
                f"- Travellers: {request.group_size}",
                f"- Activities: {', '.join(request.activities) or 'general sightseeing'}",
                f"- Weather: {json.dumps(request.weather) if request.weather else 'unknown'}",
                (
                    'Respond with JSON: {"categories": [{"name", "items": [{"name", "quantity"}]}], '
                    '"weatherTip", "tips"}. Category names: clothing, toiletries, electronics, '
                    "documents, accessories, footwear, essentials, weather."
                ),
            ]
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are a practical Sri Lanka travel packing expert."},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.5,
                max_tokens=1500,
            )
            content = response.choices[0].message.content or ""
            if not content.strip():
                logger.warning("OpenAI returned empty packing list, using deterministic stub fallback")
                return await self._fallback.packing_list(request)
            payload = json.loads(content)
            return PackingListResponse(
                packing_list=PackingList.model_validate(payload.get("packingList", payload)),
                source="openai",
            )

        except Exception as e:
            logger.error(f"OpenAI packing list call failed: {e}")
            logger.warning("Falling back to deterministic stub client for packing list")
            return await self._fallback.packing_list(request)

    def _build_system_prompt(self) -> str:
        """Build system prompt for recommendations."""
        return """You are an expert Sri Lanka travel planner with deep local knowledge.
Respond with a single JSON object with these keys:
topAttractions, recommendedRestaurants, recommendedAccommodations (arrays of objects
with at least name, type, cost in LKR, location), transportEstimate, budgetBreakdown,
tripSummary.

CRITICAL CONSTRAINTS:
- Use realistic 2026 local prices in LKR. Never invent low prices to fit a budget.
- Group each day's attractions by geographic proximity.
- At least 70% of attractions must relate to the traveller's interests.
- Never include a place listed under "Already added"."""

    def _build_prompt(self, request: RecommendationRequest) -> str:
        """Build the trip description for the LLM."""
        accom = ACCOMMODATION_COSTS[request.accommodation_type.value]
        transport = TRANSPORT_COSTS[request.transport_mode.value]
        daily_budget = round(request.budget / request.duration)
        interests = ", ".join(request.interests) or "general sightseeing"

        lines = [
            f"Create a {request.duration}-day itinerary.",
            f"- Destination: {request.destination}, Sri Lanka",
            f"- Dates: {request.start_date or 'flexible'} to {request.end_date or 'flexible'}",
            f"- Budget: LKR {request.budget:,} total (~LKR {daily_budget:,}/day)",
            f"- Group size: {request.group_size}",
            f"- Interests: {interests}",
            (
                f"- Accommodation: {request.accommodation_type.value} "
                f"(LKR {accom['min']:,}-{accom['max']:,}/night)"
            ),
            (
                f"- Transport: {request.transport_mode.value} "
                f"(LKR {transport['min']:,}-{transport['max']:,}/day)"
            ),
            f"- Attractions wanted: {min(request.duration * 6, 30)}",
            f"- Restaurants wanted: {min(request.duration * 3, 15)}",
        ]
        if request.exclude:
            lines.append(f"- Already added (exclude): {', '.join(request.exclude)}")
        return "\n".join(lines)


def get_recommendation_client() -> RecommendationClient:
    """Factory function to get appropriate client based on config.

    Returns:
        OpenAIRecommendationClient if API key is configured, DeterministicStubClient otherwise
    """
    settings = get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for recommendations")
        return OpenAIRecommendationClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
