"""SQLAlchemy ORM models for saved trips, favorites and notification settings."""

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Index, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JsonPayload = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TripRecord(Base):
    """Trip table - one row per saved trip, body kept as JSON."""

    __tablename__ = "trip"
    __table_args__ = (
        UniqueConstraint("user_id", "trip_id", name="uq_trip_user_trip_id"),
        Index("idx_trip_user_dates", "user_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    trip_id: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JsonPayload, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FavoriteRecord(Base):
    """Favorite table - favorited attractions per user."""

    __tablename__ = "favorite"
    __table_args__ = (
        UniqueConstraint("user_id", "attraction_id", name="uq_favorite_user_attraction"),
        Index("idx_favorite_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    attraction_id: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JsonPayload, nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class NotificationSettingsRecord(Base):
    """Notification settings table - at most one row per user."""

    __tablename__ = "notification_settings"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    trip_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    weather_alerts: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reminder_days: Mapped[list[int]] = mapped_column(JsonPayload, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
