"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from backend.app.db.context import RequestContext
from backend.app.models.notifications import NotificationSettings
from backend.app.models.trip import Favorite, Trip


class TripNotFoundError(LookupError):
    """Trip does not exist for this user."""


class DuplicateTripError(ValueError):
    """A trip with the same ID is already saved for this user."""


class DuplicateFavoriteError(ValueError):
    """Attraction is already in the user's favorites."""


class TripRepository(Protocol):
    """Repository for saved trips, scoped per user."""

    async def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the user's trips, most recently updated first.

        Args:
            ctx: Request context (enforces ownership)

        Returns:
            List of trips
        """
        ...

    async def get_trip(self, trip_id: str, ctx: RequestContext) -> Trip | None:
        """Get trip by ID.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces ownership)

        Returns:
            Trip or None if not found
        """
        ...

    async def create_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Persist a new trip.

        Args:
            trip: Trip to save
            ctx: Request context

        Returns:
            Stored trip

        Raises:
            DuplicateTripError: If the user already has a trip with this ID
        """
        ...

    async def update_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Replace a stored trip.

        Raises:
            TripNotFoundError: If the trip does not exist for this user
        """
        ...

    async def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip, returning False if it did not exist."""
        ...


class FavoriteRepository(Protocol):
    """Repository for favorite attractions, scoped per user."""

    async def list_favorites(self, ctx: RequestContext) -> list[Favorite]:
        """List favorites in the order they were added."""
        ...

    async def add_favorite(self, favorite: Favorite, ctx: RequestContext) -> Favorite:
        """Add a favorite.

        Raises:
            DuplicateFavoriteError: If the attraction is already a favorite
        """
        ...

    async def remove_favorite(self, attraction_id: str, ctx: RequestContext) -> bool:
        """Remove a favorite, returning False if it was not present."""
        ...


class NotificationSettingsRepository(Protocol):
    """Repository for notification preferences, one row per user."""

    async def get_settings(self, ctx: RequestContext) -> NotificationSettings | None:
        """Stored preferences, or None if the user never saved any."""
        ...

    async def save_settings(
        self, settings: NotificationSettings, ctx: RequestContext
    ) -> NotificationSettings:
        """Replace the user's preferences and return the stored copy."""
        ...


class UsageStore(Protocol):
    """Per-feature usage counters.

    A counter is identified by a key and a scope. Reading or incrementing
    with a scope other than the stored one treats the counter as 0, which is
    how daily counters reset at UTC midnight.
    """

    def get(self, key: str, scope: str) -> int:
        """Current count for the key in this scope."""
        ...

    def increment(self, key: str, scope: str) -> int:
        """Atomically increment and return the new count."""
        ...

    def decrement(self, key: str, scope: str) -> int:
        """Atomically decrement (not below 0) and return the new count."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
