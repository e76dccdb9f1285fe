"""Feature access models - limits configuration and gate decisions."""

from enum import Enum

from pydantic import Field

from backend.app.models.common import CamelModel


class AccessState(str, Enum):
    """Outcome of a feature access check."""

    ALLOWED_UNLIMITED = "allowed-unlimited"
    ALLOWED_WITH_QUOTA = "allowed-with-remaining-quota"
    DENIED_QUOTA_EXHAUSTED = "denied-quota-exhausted"
    DENIED_FEATURE_DISABLED = "denied-feature-disabled"


class QuotaScope(str, Enum):
    """Key space a usage counter resets against."""

    DAILY = "daily"
    SESSION = "session"
    TRIP = "trip"  # per-trip caps, never reset


class UsageCounter(CamelModel):
    """Stored usage of one feature by one caller."""

    count: int = Field(ge=0)
    scope: str  # UTC date for users, "session" for guests, "trip" for per-trip caps


class FeatureLimit(CamelModel):
    """Configuration of one feature for one audience."""

    enabled: bool = True
    max_uses: int | None = None  # None means not metered
    reason: str | None = None
    show_upgrade: bool = False
    can_save: bool | None = None
    can_submit: bool | None = None
    can_generate: bool | None = None
    show_upgrade_after: bool | None = None
    use_cache_when_exhausted: bool = False
    max_items: int | None = None  # collection caps (trips, items per trip, favorites)


class FeatureDecision(CamelModel):
    """Result of ``FeatureAccessGate.can_use_feature``."""

    allowed: bool
    state: AccessState
    reason: str | None = None
    remaining: int | None = None
    show_upgrade: bool | None = None
    limit_reached: bool | None = None
    use_cache: bool | None = None
    is_guest: bool | None = None
    dev_mode: bool | None = None
    can_save: bool | None = None
    can_submit: bool | None = None
    show_upgrade_after: bool | None = None
    can_generate: bool | None = None
    # Counter a consumed use was charged to; kept server-side for release
    claim: UsageCounter | None = Field(None, exclude=True)
