"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- trip (saved trips, JSON body)
- favorite (favorited attractions)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JsonPayload = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create trip and favorite tables."""
    op.create_table(
        "trip",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("trip_id", sa.Text(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("data", JsonPayload, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "trip_id", name="uq_trip_user_trip_id"),
    )
    op.create_index("idx_trip_user_dates", "trip", ["user_id", "start_date", "end_date"])

    op.create_table(
        "favorite",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("attraction_id", sa.Text(), nullable=False),
        sa.Column("data", JsonPayload, nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "attraction_id", name="uq_favorite_user_attraction"),
    )
    op.create_index("idx_favorite_user", "favorite", ["user_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_favorite_user", table_name="favorite")
    op.drop_table("favorite")
    op.drop_index("idx_trip_user_dates", table_name="trip")
    op.drop_table("trip")
