"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = None

    # Cache / counters
    redis_url: str | None = None

    # Bypasses every feature limit (testing only)
    dev_mode: bool = False

    # External APIs
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"

    # Guest quotas (per browser session)
    guest_ai_chat_per_session: int = 3
    guest_ai_recommendations_per_session: int = 1

    # Authenticated quotas (per UTC day)
    user_ai_chat_per_day: int = 20
    user_ai_recommendations_per_day: int = 5

    # Collection caps for authenticated users
    max_active_trips: int = 10
    max_items_per_trip: int = 50
    max_favorites: int = 100

    # Recommendation cache
    recommendation_cache_ttl_seconds: int = 24 * 3600
    recommendation_cache_max_entries: int = 1000

    # Rate limiting (requests per minute)
    ai_requests_per_min: int = 15
    crud_ops_per_min: int = 60

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Display currency for budget warnings
    currency: str = "LKR"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
