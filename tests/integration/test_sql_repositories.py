"""Integration tests for SQL repositories (SQLite via aiosqlite)."""

import uuid
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.repositories import (
    DuplicateFavoriteError,
    DuplicateTripError,
    TripNotFoundError,
)
from backend.app.db.sql_repositories import (
    SqlFavoriteRepository,
    SqlNotificationSettingsRepository,
    SqlTripRepository,
)
from backend.app.itinerary.mutator import build_days
from backend.app.models.notifications import NotificationSettings
from backend.app.models.trip import Favorite, SavedItem, Trip


def make_trip(destination: str = "Kandy", start: date = date(2026, 1, 10)) -> Trip:
    end = date(start.year, start.month, start.day + 3)
    return Trip(
        trip_id=f"{destination.lower()}-{start.isoformat()}",
        destination=destination,
        start_date=start,
        end_date=end,
        budget=100000,
        saved_items=[SavedItem(name="Temple of the Tooth", cost=500)],
        itinerary=build_days(start, end),
    )


@pytest.mark.asyncio
async def test_trip_round_trip(sqlite_session: AsyncSession, user_ctx: RequestContext) -> None:
    repo = SqlTripRepository(sqlite_session)

    created = await repo.create_trip(make_trip(), user_ctx)
    loaded = await repo.get_trip(created.trip_id, user_ctx)

    assert loaded is not None
    assert loaded.destination == "Kandy"
    assert loaded.saved_items[0].cost == 500
    assert len(loaded.itinerary) == 3
    assert loaded.created_at is not None


@pytest.mark.asyncio
async def test_trips_are_scoped_to_user(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    repo = SqlTripRepository(sqlite_session)
    other = RequestContext(user_id=uuid.uuid4())

    await repo.create_trip(make_trip(), user_ctx)

    assert await repo.list_trips(other) == []
    assert await repo.get_trip("kandy-2026-01-10", other) is None
    assert await repo.delete_trip("kandy-2026-01-10", other) is False


@pytest.mark.asyncio
async def test_duplicate_trip_id_raises(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    repo = SqlTripRepository(sqlite_session)
    await repo.create_trip(make_trip(), user_ctx)

    with pytest.raises(DuplicateTripError):
        await repo.create_trip(make_trip(), user_ctx)

    # Session is still usable after the rollback
    assert len(await repo.list_trips(user_ctx)) == 1


@pytest.mark.asyncio
async def test_list_most_recently_updated_first(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    repo = SqlTripRepository(sqlite_session)
    kandy = await repo.create_trip(make_trip("Kandy"), user_ctx)
    await repo.create_trip(make_trip("Ella", date(2026, 2, 1)), user_ctx)

    await repo.update_trip(kandy.model_copy(update={"budget": 5}), user_ctx)

    assert [t.destination for t in await repo.list_trips(user_ctx)] == ["Kandy", "Ella"]


@pytest.mark.asyncio
async def test_update_keeps_created_at(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    repo = SqlTripRepository(sqlite_session)
    created = await repo.create_trip(make_trip(), user_ctx)

    updated = await repo.update_trip(
        created.model_copy(update={"end_date": date(2026, 1, 20)}), user_ctx
    )
    loaded = await repo.get_trip(created.trip_id, user_ctx)

    assert updated.created_at == created.created_at
    assert loaded is not None
    assert loaded.end_date == date(2026, 1, 20)


@pytest.mark.asyncio
async def test_update_missing_trip_raises(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    with pytest.raises(TripNotFoundError):
        await SqlTripRepository(sqlite_session).update_trip(make_trip(), user_ctx)


@pytest.mark.asyncio
async def test_delete_trip(sqlite_session: AsyncSession, user_ctx: RequestContext) -> None:
    repo = SqlTripRepository(sqlite_session)
    await repo.create_trip(make_trip(), user_ctx)

    assert await repo.delete_trip("kandy-2026-01-10", user_ctx) is True
    assert await repo.get_trip("kandy-2026-01-10", user_ctx) is None


@pytest.mark.asyncio
async def test_guest_has_no_saved_trips(
    sqlite_session: AsyncSession, guest_ctx: RequestContext
) -> None:
    with pytest.raises(PermissionError):
        await SqlTripRepository(sqlite_session).list_trips(guest_ctx)


@pytest.mark.asyncio
async def test_favorites(sqlite_session: AsyncSession, user_ctx: RequestContext) -> None:
    repo = SqlFavoriteRepository(sqlite_session)

    await repo.add_favorite(Favorite(attraction_id="sigiriya", name="Sigiriya"), user_ctx)
    await repo.add_favorite(Favorite(attraction_id="yala", name="Yala"), user_ctx)

    with pytest.raises(DuplicateFavoriteError):
        await repo.add_favorite(Favorite(attraction_id="yala"), user_ctx)

    assert [f.attraction_id for f in await repo.list_favorites(user_ctx)] == ["sigiriya", "yala"]
    assert await repo.remove_favorite("sigiriya", user_ctx) is True
    assert await repo.remove_favorite("sigiriya", user_ctx) is False
    assert [f.attraction_id for f in await repo.list_favorites(user_ctx)] == ["yala"]


@pytest.mark.asyncio
async def test_notification_settings_upsert(
    sqlite_session: AsyncSession, user_ctx: RequestContext
) -> None:
    repo = SqlNotificationSettingsRepository(sqlite_session)

    assert await repo.get_settings(user_ctx) is None

    await repo.save_settings(NotificationSettings(reminder_days=[2]), user_ctx)
    saved = await repo.save_settings(
        NotificationSettings(trip_reminders=False, reminder_days=[10, 5]), user_ctx
    )
    loaded = await repo.get_settings(user_ctx)

    assert saved.updated_at is not None
    assert loaded is not None
    assert loaded.trip_reminders is False
    assert loaded.weather_alerts is True
    assert loaded.reminder_days == [10, 5]
    assert await repo.get_settings(RequestContext(user_id=uuid.uuid4())) is None


@pytest.mark.asyncio
async def test_guest_has_no_notification_settings(sqlite_session: AsyncSession) -> None:
    repo = SqlNotificationSettingsRepository(sqlite_session)

    with pytest.raises(PermissionError):
        await repo.get_settings(RequestContext(user_id=None, session_id="s"))
