"""Tests for database URL handling."""

import pytest

from backend.app.config import Settings
from backend.app.db.engine import create_async_engine_from_settings, to_async_url


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql://u:p@db:5432/trips", "postgresql+asyncpg://u:p@db:5432/trips"),
        ("postgres://u:p@db/trips", "postgresql+asyncpg://u:p@db/trips"),
        ("sqlite:///./trips.db", "sqlite+aiosqlite:///./trips.db"),
        ("postgresql+asyncpg://u:p@db/trips", "postgresql+asyncpg://u:p@db/trips"),
    ],
)
def test_to_async_url(url: str, expected: str) -> None:
    assert to_async_url(url) == expected


def test_engine_requires_database_url() -> None:
    with pytest.raises(ValueError, match="DATABASE_URL"):
        create_async_engine_from_settings(Settings(_env_file=None, database_url=None))  # type: ignore[call-arg]
