"""In-memory implementations of repository interfaces."""

import threading
import uuid
from datetime import datetime, timedelta, timezone

from backend.app.db.context import RequestContext
from backend.app.db.repositories import (
    DuplicateFavoriteError,
    DuplicateTripError,
    RetryAfter,
    TripNotFoundError,
)
from backend.app.models.notifications import NotificationSettings
from backend.app.models.trip import Favorite, Trip


def _owner(ctx: RequestContext) -> uuid.UUID:
    if ctx.user_id is None:
        raise PermissionError("Guests cannot access saved data")
    return ctx.user_id


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self._trips: dict[tuple[uuid.UUID, str], Trip] = {}

    async def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the user's trips, most recently updated first."""
        owner = _owner(ctx)
        trips = [trip for (user_id, _), trip in self._trips.items() if user_id == owner]
        trips.sort(key=lambda t: t.updated_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return trips

    async def get_trip(self, trip_id: str, ctx: RequestContext) -> Trip | None:
        """Get trip by ID."""
        return self._trips.get((_owner(ctx), trip_id))

    async def create_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Persist a new trip."""
        key = (_owner(ctx), trip.trip_id)
        if key in self._trips:
            raise DuplicateTripError(f"Trip {trip.trip_id} already exists")

        now = datetime.now(timezone.utc)
        stored = trip.model_copy(update={"created_at": now, "updated_at": now})
        self._trips[key] = stored
        return stored

    async def update_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Replace a stored trip."""
        key = (_owner(ctx), trip.trip_id)
        existing = self._trips.get(key)
        if existing is None:
            raise TripNotFoundError(trip.trip_id)

        stored = trip.model_copy(
            update={"created_at": existing.created_at, "updated_at": datetime.now(timezone.utc)}
        )
        self._trips[key] = stored
        return stored

    async def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip."""
        return self._trips.pop((_owner(ctx), trip_id), None) is not None


class InMemoryFavoriteRepository:
    """In-memory implementation of FavoriteRepository."""

    def __init__(self) -> None:
        self._favorites: dict[uuid.UUID, list[Favorite]] = {}

    async def list_favorites(self, ctx: RequestContext) -> list[Favorite]:
        """List favorites in insertion order."""
        return list(self._favorites.get(_owner(ctx), []))

    async def add_favorite(self, favorite: Favorite, ctx: RequestContext) -> Favorite:
        """Add a favorite."""
        favorites = self._favorites.setdefault(_owner(ctx), [])
        if any(f.attraction_id == favorite.attraction_id for f in favorites):
            raise DuplicateFavoriteError("Attraction already in favorites")

        stored = favorite.model_copy(update={"added_at": datetime.now(timezone.utc)})
        favorites.append(stored)
        return stored

    async def remove_favorite(self, attraction_id: str, ctx: RequestContext) -> bool:
        """Remove a favorite."""
        favorites = self._favorites.get(_owner(ctx), [])
        remaining = [f for f in favorites if f.attraction_id != attraction_id]
        if len(remaining) == len(favorites):
            return False
        self._favorites[_owner(ctx)] = remaining
        return True


class InMemoryNotificationSettingsRepository:
    """In-memory implementation of NotificationSettingsRepository."""

    def __init__(self) -> None:
        self._settings: dict[uuid.UUID, NotificationSettings] = {}

    async def get_settings(self, ctx: RequestContext) -> NotificationSettings | None:
        return self._settings.get(_owner(ctx))

    async def save_settings(
        self, settings: NotificationSettings, ctx: RequestContext
    ) -> NotificationSettings:
        stored = settings.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self._settings[_owner(ctx)] = stored
        return stored


class InMemoryUsageStore:
    """In-memory implementation of UsageStore.

    A single lock makes each read-modify-write atomic across threads, so
    concurrent requests handled by a threadpool cannot lose increments.
    """

    def __init__(self) -> None:
        self._counters: dict[str, tuple[str, int]] = {}
        self._lock = threading.Lock()

    def _current(self, key: str, scope: str) -> int:
        stored = self._counters.get(key)
        if stored is None or stored[0] != scope:
            return 0
        return stored[1]

    def get(self, key: str, scope: str) -> int:
        """Current count for the key in this scope."""
        with self._lock:
            return self._current(key, scope)

    def increment(self, key: str, scope: str) -> int:
        """Atomically increment and return the new count."""
        with self._lock:
            count = self._current(key, scope) + 1
            self._counters[key] = (scope, count)
            return count

    def decrement(self, key: str, scope: str) -> int:
        """Atomically decrement and return the new count.

        A scope the key has already moved past is left alone; its counter
        no longer exists.
        """
        with self._lock:
            stored = self._counters.get(key)
            if stored is None or stored[0] != scope:
                return 0
            count = max(0, stored[1] - 1)
            self._counters[key] = (scope, count)
            return count


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        window = timedelta(seconds=self._window_seconds)
        stored = self._windows.get(key)

        if stored is None or now >= stored[0] + window:
            self._windows[key] = (now, 1)
            return None

        window_start, count = stored
        if count >= self._max_requests:
            seconds_remaining = int((window_start + window - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
