"""Feature limits per audience.

Guests get a taste of the AI features per browser session to encourage
signing up; signed-in users get daily quotas that keep API cost bounded.
"""

from backend.app.config import Settings
from backend.app.models.access import FeatureLimit, QuotaScope
from backend.app.models.common import Audience

FeatureLimits = dict[Audience, dict[str, FeatureLimit]]

AI_CHAT = "aiChat"
AI_RECOMMENDATIONS = "aiRecommendations"
PACKING_LIST = "packingList"
WEATHER_ALERTS = "weatherAlerts"
SAVE_TRIP = "saveTrip"
ADD_TO_ITINERARY = "addToItinerary"
FAVORITES = "favorites"
TRIP_PLANNER = "tripPlanner"
VIEW_MAP = "viewMap"
VIEW_WEATHER = "viewWeather"
VIEW_RECOMMENDATIONS = "viewRecommendations"

QUOTA_SCOPES: dict[Audience, QuotaScope] = {
    Audience.guest: QuotaScope.SESSION,
    Audience.authenticated: QuotaScope.DAILY,
}


def build_feature_limits(settings: Settings) -> FeatureLimits:
    """Build the feature decision table from settings."""
    guest = {
        AI_CHAT: FeatureLimit(
            max_uses=settings.guest_ai_chat_per_session,
            reason="Sign in for unlimited AI chat assistance",
            show_upgrade=True,
        ),
        AI_RECOMMENDATIONS: FeatureLimit(
            max_uses=settings.guest_ai_recommendations_per_session,
            reason="Sign in to explore all destinations and get more recommendations",
            show_upgrade=True,
            use_cache_when_exhausted=True,
        ),
        PACKING_LIST: FeatureLimit(
            can_generate=False,
            reason="Sign in to generate personalized packing lists",
        ),
        WEATHER_ALERTS: FeatureLimit(enabled=False, reason="Sign in to receive weather alerts"),
        SAVE_TRIP: FeatureLimit(enabled=False, reason="Sign in to save your trips"),
        ADD_TO_ITINERARY: FeatureLimit(enabled=False, reason="Sign in to build your itinerary"),
        FAVORITES: FeatureLimit(enabled=False, reason="Sign in to save favorites"),
        TRIP_PLANNER: FeatureLimit(
            can_submit=True,
            show_upgrade_after=True,
            reason="Sign in to save and manage your trip",
        ),
        VIEW_MAP: FeatureLimit(),
        VIEW_WEATHER: FeatureLimit(),
        VIEW_RECOMMENDATIONS: FeatureLimit(
            can_save=False,
            show_upgrade=True,
            reason="Sign in to save recommendations to your itinerary",
        ),
    }

    authenticated = {
        AI_CHAT: FeatureLimit(
            max_uses=settings.user_ai_chat_per_day,
            reason="Daily limit reached. Try again tomorrow!",
        ),
        AI_RECOMMENDATIONS: FeatureLimit(
            max_uses=settings.user_ai_recommendations_per_day,
            reason="Daily limit reached. Recommendations are cached for 24 hours.",
            use_cache_when_exhausted=True,
        ),
        PACKING_LIST: FeatureLimit(
            can_generate=True,
            max_items=3,
            reason="Maximum regenerations reached for this trip",
        ),
        WEATHER_ALERTS: FeatureLimit(),
        SAVE_TRIP: FeatureLimit(
            max_items=settings.max_active_trips,
            reason=f"Maximum {settings.max_active_trips} active trips allowed",
        ),
        ADD_TO_ITINERARY: FeatureLimit(
            max_items=settings.max_items_per_trip,
            reason=f"Maximum {settings.max_items_per_trip} items per trip",
        ),
        FAVORITES: FeatureLimit(
            max_items=settings.max_favorites,
            reason=f"Maximum {settings.max_favorites} favorites allowed",
        ),
        TRIP_PLANNER: FeatureLimit(can_submit=True, show_upgrade_after=False),
        VIEW_MAP: FeatureLimit(),
        VIEW_WEATHER: FeatureLimit(),
        VIEW_RECOMMENDATIONS: FeatureLimit(can_save=True),
    }

    return {Audience.guest: guest, Audience.authenticated: authenticated}
