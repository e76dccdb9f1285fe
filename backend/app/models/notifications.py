"""Notification preferences for trip reminders and weather alerts."""

from datetime import datetime
from typing import Annotated

from pydantic import Field, field_validator

from backend.app.models.common import CamelModel

DEFAULT_REMINDER_DAYS = [7, 3, 1]


class NotificationSettings(CamelModel):
    """A user's notification preferences.

    Saving replaces every field; fields left out take their defaults.
    """

    trip_reminders: bool = True
    weather_alerts: bool = True
    reminder_days: list[Annotated[int, Field(ge=0, le=365)]] = Field(
        default_factory=lambda: list(DEFAULT_REMINDER_DAYS),
        description="Days before a trip starts to send a reminder",
    )
    updated_at: datetime | None = None

    @field_validator("reminder_days")
    @classmethod
    def _unique_descending(cls, days: list[int]) -> list[int]:
        return sorted(set(days), reverse=True)
