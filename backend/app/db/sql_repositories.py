"""SQL implementations of repository interfaces."""

from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import FavoriteRecord, NotificationSettingsRecord, TripRecord
from backend.app.db.queries import require_user, select_favorites, select_trips
from backend.app.db.repositories import (
    DuplicateFavoriteError,
    DuplicateTripError,
    TripNotFoundError,
)
from backend.app.models.notifications import NotificationSettings
from backend.app.models.trip import Favorite, Trip


def _to_trip(record: TripRecord) -> Trip:
    return Trip.model_validate(record.data)


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_record(self, trip_id: str, ctx: RequestContext) -> TripRecord | None:
        result = await self._session.execute(
            select_trips(ctx).where(TripRecord.trip_id == trip_id)
        )
        return result.scalar_one_or_none()

    async def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the user's trips, most recently updated first."""
        result = await self._session.execute(
            select_trips(ctx).order_by(TripRecord.updated_at.desc())
        )
        return [_to_trip(record) for record in result.scalars()]

    async def get_trip(self, trip_id: str, ctx: RequestContext) -> Trip | None:
        """Get trip by ID."""
        record = await self._get_record(trip_id, ctx)
        return _to_trip(record) if record is not None else None

    async def create_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Persist a new trip."""
        now = datetime.now(timezone.utc)
        stored = trip.model_copy(update={"created_at": now, "updated_at": now})

        record = TripRecord(
            user_id=require_user(ctx),
            trip_id=stored.trip_id,
            destination=stored.destination,
            start_date=stored.start_date,
            end_date=stored.end_date,
            status=stored.status.value,
            data=stored.model_dump(mode="json"),
            created_at=now,
            updated_at=now,
        )
        self._session.add(record)

        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateTripError(f"Trip {trip.trip_id} already exists") from e

        return stored

    async def update_trip(self, trip: Trip, ctx: RequestContext) -> Trip:
        """Replace a stored trip."""
        record = await self._get_record(trip.trip_id, ctx)
        if record is None:
            raise TripNotFoundError(trip.trip_id)

        now = datetime.now(timezone.utc)
        stored = trip.model_copy(
            update={"created_at": Trip.model_validate(record.data).created_at, "updated_at": now}
        )

        record.destination = stored.destination
        record.start_date = stored.start_date
        record.end_date = stored.end_date
        record.status = stored.status.value
        record.data = stored.model_dump(mode="json")
        record.updated_at = now

        await self._session.commit()
        return stored

    async def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip."""
        record = await self._get_record(trip_id, ctx)
        if record is None:
            return False

        await self._session.delete(record)
        await self._session.commit()
        return True


class SqlFavoriteRepository:
    """SQL implementation of FavoriteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_favorites(self, ctx: RequestContext) -> list[Favorite]:
        """List favorites in the order they were added."""
        result = await self._session.execute(
            select_favorites(ctx).order_by(FavoriteRecord.added_at)
        )
        return [Favorite.model_validate(record.data) for record in result.scalars()]

    async def add_favorite(self, favorite: Favorite, ctx: RequestContext) -> Favorite:
        """Add a favorite."""
        existing = await self._session.execute(
            select_favorites(ctx).where(FavoriteRecord.attraction_id == favorite.attraction_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateFavoriteError("Attraction already in favorites")

        now = datetime.now(timezone.utc)
        stored = favorite.model_copy(update={"added_at": now})
        self._session.add(
            FavoriteRecord(
                user_id=require_user(ctx),
                attraction_id=stored.attraction_id,
                data=stored.model_dump(mode="json"),
                added_at=now,
            )
        )

        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateFavoriteError("Attraction already in favorites") from e

        return stored

    async def remove_favorite(self, attraction_id: str, ctx: RequestContext) -> bool:
        """Remove a favorite."""
        result = await self._session.execute(
            delete(FavoriteRecord).where(
                FavoriteRecord.user_id == require_user(ctx),
                FavoriteRecord.attraction_id == attraction_id,
            )
        )
        await self._session.commit()
        return result.rowcount > 0


class SqlNotificationSettingsRepository:
    """SQL implementation of NotificationSettingsRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_settings(self, ctx: RequestContext) -> NotificationSettings | None:
        """Stored preferences, or None if the user never saved any."""
        record = await self._session.get(NotificationSettingsRecord, require_user(ctx))
        if record is None:
            return None
        return NotificationSettings(
            trip_reminders=record.trip_reminders,
            weather_alerts=record.weather_alerts,
            reminder_days=record.reminder_days,
            updated_at=record.updated_at,
        )

    async def save_settings(
        self, settings: NotificationSettings, ctx: RequestContext
    ) -> NotificationSettings:
        """Insert or replace the user's preferences."""
        user_id = require_user(ctx)
        now = datetime.now(timezone.utc)

        record = await self._session.get(NotificationSettingsRecord, user_id)
        if record is None:
            record = NotificationSettingsRecord(user_id=user_id)
            self._session.add(record)
        record.trip_reminders = settings.trip_reminders
        record.weather_alerts = settings.weather_alerts
        record.reminder_days = list(settings.reminder_days)
        record.updated_at = now

        await self._session.commit()
        return settings.model_copy(update={"updated_at": now})
