"""TTL cache for recommendation responses.

Owned by the application state rather than the module, so tests and
separate app instances each get their own cache.
"""

import hashlib
import json
import time
from collections import OrderedDict
from collections.abc import Callable

from backend.app.models.recommendations import RecommendationRequest, RecommendationResponse
from backend.app.utils.money import round_half_up

BUDGET_BUCKET = 10000


def make_cache_key(request: RecommendationRequest) -> str:
    """Stable key for requests that should share a response.

    Budgets are bucketed to the nearest 10 000 and list fields sorted, so
    near-identical requests hit the same entry. Excluded names are part of
    the key so a refresh with new exclusions gets fresh results.
    """
    normalized = {
        "destination": request.destination.lower().strip(),
        "duration": request.duration,
        "interests": sorted(request.interests),
        "budget": round_half_up(request.budget / BUDGET_BUCKET) * BUDGET_BUCKET,
        "groupSize": request.group_size,
        "accommodationType": request.accommodation_type.value,
        "transportMode": request.transport_mode.value,
        "exclude": sorted(request.exclude),
    }
    encoded = json.dumps(normalized, separators=(",", ":"), ensure_ascii=False)
    return hashlib.md5(encoded.encode("utf-8")).hexdigest()


class RecommendationCache:
    """In-memory TTL cache with a bound on entries (oldest evicted first)."""

    def __init__(
        self,
        ttl_seconds: float = 24 * 3600,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, RecommendationResponse]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> RecommendationResponse | None:
        """Cached response, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, response = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None

        return response.model_copy(deep=True)

    def set(self, key: str, response: RecommendationResponse) -> None:
        """Store a response, evicting the oldest entry when full."""
        self._entries[key] = (self._clock(), response.model_copy(deep=True))
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
