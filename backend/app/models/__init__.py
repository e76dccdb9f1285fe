"""Models package - re-exports for convenience."""

from backend.app.models.access import (
    AccessState,
    FeatureDecision,
    FeatureLimit,
    QuotaScope,
    UsageCounter,
)
from backend.app.models.budget import (
    BudgetAlert,
    BudgetAllocation,
    BudgetFit,
    CategoryAllocation,
    CategoryInfo,
    CategorySpend,
    DayBudget,
    DayCategoryBudget,
    ExpenseSummary,
    PriceDisplay,
    PriceInfo,
    PriceRange,
)
from backend.app.models.common import (
    AccommodationType,
    Audience,
    ExpenseCategory,
    Geo,
    TransportMode,
    TripStatus,
)
from backend.app.models.notifications import NotificationSettings
from backend.app.models.recommendations import (
    ChatMessage,
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
from backend.app.models.trip import (
    Activity,
    DayItinerary,
    Favorite,
    SavedItem,
    Trip,
    TripBase,
    TripConflict,
    TripWindow,
    make_trip_id,
)
from backend.app.models.violations import Violation, ViolationKind, ViolationSeverity

__all__ = [
    # Common
    "Geo",
    "AccommodationType",
    "TransportMode",
    "TripStatus",
    "ExpenseCategory",
    "Audience",
    # Trip
    "Trip",
    "TripBase",
    "TripWindow",
    "TripConflict",
    "SavedItem",
    "Activity",
    "DayItinerary",
    "Favorite",
    "make_trip_id",
    # Budget
    "BudgetAllocation",
    "CategoryAllocation",
    "CategoryInfo",
    "DayBudget",
    "DayCategoryBudget",
    "BudgetFit",
    "BudgetAlert",
    "CategorySpend",
    "ExpenseSummary",
    "PriceInfo",
    "PriceRange",
    "PriceDisplay",
    # Access
    "AccessState",
    "QuotaScope",
    "FeatureLimit",
    "FeatureDecision",
    "UsageCounter",
    # Recommendations
    "RecommendationRequest",
    "RecommendationResponse",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "PackingListRequest",
    "PackingListResponse",
    "PackingList",
    "PackingCategory",
    "PackingItem",
    # Notifications
    "NotificationSettings",
    # Violations
    "Violation",
    "ViolationKind",
    "ViolationSeverity",
]
