"""Feature-access gate: per-audience limits and usage quotas.

Authenticated users are metered per UTC calendar day under keys of the form
``serendibtrip_{userId}_{feature}``; guests are metered for the life of their
browser session under ``serendibtrip_guest_{sessionId}_{feature}``. The
decision table itself is configuration (see ``access.limits``); this module
only reads, increments and resets the counters.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from backend.app.access.limits import QUOTA_SCOPES, FeatureLimits
from backend.app.db.context import RequestContext
from backend.app.db.repositories import UsageStore
from backend.app.models.access import (
    AccessState,
    FeatureDecision,
    FeatureLimit,
    QuotaScope,
    UsageCounter,
)
from backend.app.utils.metrics import record_feature_decision

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def usage_key(ctx: RequestContext, feature: str) -> str:
    """Storage key of the usage counter for a caller and feature."""
    if ctx.is_guest:
        return f"serendibtrip_guest_{ctx.session_id}_{feature}"
    return f"serendibtrip_{ctx.user_id}_{feature}"


def generation_key(ctx: RequestContext, feature: str, subject: str) -> str:
    """Storage key of a per-trip generation counter."""
    slug = "-".join(subject.lower().split())
    return f"{usage_key(ctx, feature)}_{slug}"


class FeatureAccessGate:
    """Decides whether a caller may use a feature right now."""

    def __init__(
        self,
        limits: FeatureLimits,
        store: UsageStore,
        *,
        dev_mode: bool = False,
        clock: Clock = _utc_now,
    ) -> None:
        """Initialize gate.

        Args:
            limits: Feature decision table per audience
            store: Usage counter store
            dev_mode: Bypass every limit (testing only)
            clock: Source of the current time, used for the daily reset
        """
        self._limits = limits
        self._store = store
        self._dev_mode = dev_mode
        self._clock = clock

    @property
    def dev_mode(self) -> bool:
        return self._dev_mode

    def _scope(self, ctx: RequestContext) -> str:
        if QUOTA_SCOPES[ctx.audience] == QuotaScope.SESSION:
            return QuotaScope.SESSION.value
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date().isoformat()

    def _feature(self, ctx: RequestContext, name: str) -> FeatureLimit | None:
        return self._limits[ctx.audience].get(name)

    def _remember(self, ctx: RequestContext, name: str, decision: FeatureDecision) -> FeatureDecision:
        record_feature_decision(name, ctx.audience.value, decision.state.value)
        if not decision.allowed:
            logger.info(
                f"Feature denied: {name} for {ctx.audience.value} - {decision.reason}",
                extra={
                    "structured": {
                        "feature": name,
                        "audience": ctx.audience.value,
                        "state": decision.state.value,
                    }
                },
            )
        return decision

    def _dev_decision(self) -> FeatureDecision:
        return FeatureDecision(
            allowed=True, state=AccessState.ALLOWED_UNLIMITED, dev_mode=True
        )

    def _exhausted(self, ctx: RequestContext, feature: FeatureLimit) -> FeatureDecision:
        decision = FeatureDecision(
            allowed=False,
            state=AccessState.DENIED_QUOTA_EXHAUSTED,
            reason=feature.reason,
            remaining=0,
        )
        if ctx.is_guest:
            decision.show_upgrade = True
            decision.limit_reached = True
        if feature.use_cache_when_exhausted:
            decision.use_cache = True
        return decision

    def _decide(self, ctx: RequestContext, feature: FeatureLimit, used: int) -> FeatureDecision:
        # Case 1: Switched off for this audience
        if not feature.enabled:
            return FeatureDecision(
                allowed=False,
                state=AccessState.DENIED_FEATURE_DISABLED,
                reason=feature.reason,
                show_upgrade=True,
            )

        # Case 2: Metered
        if feature.max_uses is not None:
            remaining = feature.max_uses - used
            if remaining <= 0:
                return self._exhausted(ctx, feature)
            return FeatureDecision(
                allowed=True,
                state=AccessState.ALLOWED_WITH_QUOTA,
                remaining=remaining,
                is_guest=True if ctx.is_guest else None,
            )

        # Case 3: Unmetered, possibly with guest restrictions
        return FeatureDecision(
            allowed=True,
            state=AccessState.ALLOWED_UNLIMITED,
            reason=feature.reason if ctx.is_guest else None,
            show_upgrade=feature.show_upgrade or None,
            can_save=feature.can_save,
            can_submit=feature.can_submit,
            can_generate=feature.can_generate,
            show_upgrade_after=feature.show_upgrade_after,
            is_guest=True if ctx.is_guest else None,
        )

    def can_use_feature(self, ctx: RequestContext, name: str) -> FeatureDecision:
        """Check access without consuming quota.

        Args:
            ctx: Request context
            name: Feature name, e.g. "aiChat"

        Returns:
            FeatureDecision for the caller
        """
        if self._dev_mode:
            return self._dev_decision()

        feature = self._feature(ctx, name)
        if feature is None:
            return self._remember(
                ctx,
                name,
                FeatureDecision(
                    allowed=False,
                    state=AccessState.DENIED_FEATURE_DISABLED,
                    reason="Unknown feature",
                ),
            )

        used = 0
        if feature.max_uses is not None:
            used = self._store.get(usage_key(ctx, name), self._scope(ctx))

        return self._remember(ctx, name, self._decide(ctx, feature, used))

    def record_usage(self, ctx: RequestContext, name: str) -> int | None:
        """Count one accepted use of a metered feature.

        Callers must call this exactly once per accepted use. Unmetered and
        unknown features are ignored.

        Returns:
            New count, or None if the feature is not metered
        """
        feature = self._feature(ctx, name)
        if feature is None or feature.max_uses is None:
            return None
        return self._store.increment(usage_key(ctx, name), self._scope(ctx))

    def try_consume(self, ctx: RequestContext, name: str) -> FeatureDecision:
        """Check and count one use in a single step.

        The counter is incremented first; if that pushes it past the quota
        the increment is rolled back and the use is denied. Two concurrent
        requests for the last remaining use cannot both be allowed.
        """
        if self._dev_mode:
            return self._dev_decision()

        feature = self._feature(ctx, name)
        if feature is None or not feature.enabled or feature.max_uses is None:
            return self.can_use_feature(ctx, name)

        key = usage_key(ctx, name)
        scope = self._scope(ctx)
        count = self._store.increment(key, scope)
        if count > feature.max_uses:
            self._store.decrement(key, scope)
            return self._remember(ctx, name, self._exhausted(ctx, feature))

        return self._remember(
            ctx,
            name,
            FeatureDecision(
                allowed=True,
                state=AccessState.ALLOWED_WITH_QUOTA,
                remaining=feature.max_uses - count,
                is_guest=True if ctx.is_guest else None,
                claim=UsageCounter(count=count, scope=scope),
            ),
        )

    def release(self, ctx: RequestContext, name: str, claim: UsageCounter | None = None) -> None:
        """Give back a use consumed by ``try_consume`` that did not complete.

        Pass the decision's ``claim`` so the use goes back to the period it
        was charged to, even if the UTC day has rolled over since.
        """
        feature = self._feature(ctx, name)
        if self._dev_mode or feature is None or feature.max_uses is None:
            return
        scope = claim.scope if claim is not None else self._scope(ctx)
        self._store.decrement(usage_key(ctx, name), scope)

    def get_remaining_usage(self, ctx: RequestContext, name: str) -> int | None:
        """Uses left in the current scope, or None if unlimited."""
        feature = self._feature(ctx, name)
        if self._dev_mode or feature is None or feature.max_uses is None:
            return None
        used = self._store.get(usage_key(ctx, name), self._scope(ctx))
        return max(0, feature.max_uses - used)

    def get_usage(self, ctx: RequestContext, name: str) -> UsageCounter | None:
        """Counter for a metered feature in the caller's current scope."""
        feature = self._feature(ctx, name)
        if feature is None or feature.max_uses is None:
            return None
        scope = self._scope(ctx)
        return UsageCounter(count=self._store.get(usage_key(ctx, name), scope), scope=scope)

    def get_max_usage(self, ctx: RequestContext, name: str) -> int | None:
        """Quota for the caller's audience, or None if unlimited."""
        feature = self._feature(ctx, name)
        if feature is None:
            return None
        return feature.max_uses

    def check_collection_limit(
        self, ctx: RequestContext, name: str, current_count: int, adding: int = 1
    ) -> FeatureDecision:
        """Check a collection cap such as max saved trips or favorites.

        Args:
            ctx: Request context
            name: Feature name ("saveTrip", "addToItinerary", "favorites")
            current_count: Items already in the collection
            adding: Items about to be added

        Returns:
            Denied decision if the collection is full or the feature disabled
        """
        decision = self.can_use_feature(ctx, name)
        if not decision.allowed or decision.dev_mode:
            return decision

        feature = self._feature(ctx, name)
        if feature is not None and feature.max_items is not None and current_count + adding > feature.max_items:
            return self._remember(
                ctx,
                name,
                FeatureDecision(
                    allowed=False,
                    state=AccessState.DENIED_QUOTA_EXHAUSTED,
                    reason=feature.reason,
                    remaining=0,
                ),
            )

        return decision

    def try_consume_generation(self, ctx: RequestContext, name: str, subject: str) -> FeatureDecision:
        """Count one generation against a per-trip cap such as packing lists.

        The counter never resets; ``max_items`` is the number of generations
        allowed per ``subject``. Over the cap the increment is rolled back.

        Args:
            ctx: Request context
            name: Feature name, e.g. "packingList"
            subject: Trip id, or destination for unsaved trips
        """
        if self._dev_mode:
            return self._dev_decision()

        feature = self._feature(ctx, name)
        if feature is None or not feature.enabled or not feature.can_generate:
            return self._remember(
                ctx,
                name,
                FeatureDecision(
                    allowed=False,
                    state=AccessState.DENIED_FEATURE_DISABLED,
                    reason=feature.reason if feature is not None else "Unknown feature",
                    show_upgrade=True if ctx.is_guest else None,
                    can_generate=False,
                ),
            )

        key = generation_key(ctx, name, subject)
        scope = QuotaScope.TRIP.value
        count = self._store.increment(key, scope)
        denied = self.check_collection_limit(ctx, name, count - 1)
        if not denied.allowed:
            self._store.decrement(key, scope)
            return denied

        remaining: int | None = None
        state = AccessState.ALLOWED_UNLIMITED
        if feature.max_items is not None:
            remaining = feature.max_items - count
            state = AccessState.ALLOWED_WITH_QUOTA
        return FeatureDecision(
            allowed=True,
            state=state,
            remaining=remaining,
            can_generate=True,
            claim=UsageCounter(count=count, scope=scope),
        )

    def release_generation(self, ctx: RequestContext, name: str, subject: str) -> None:
        """Give back a generation counted by ``try_consume_generation``."""
        if self._dev_mode:
            return
        self._store.decrement(generation_key(ctx, name, subject), QuotaScope.TRIP.value)

    def summary(self, ctx: RequestContext) -> dict[str, FeatureDecision]:
        """Decisions for every feature configured for the caller's audience."""
        return {name: self.can_use_feature(ctx, name) for name in self._limits[ctx.audience]}
