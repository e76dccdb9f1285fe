"""Notification settings

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

Creates:
- notification_settings (trip reminder and weather alert preferences)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JsonPayload = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create notification_settings table."""
    op.create_table(
        "notification_settings",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("trip_reminders", sa.Boolean(), nullable=False),
        sa.Column("weather_alerts", sa.Boolean(), nullable=False),
        sa.Column("reminder_days", JsonPayload, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop notification_settings table."""
    op.drop_table("notification_settings")
