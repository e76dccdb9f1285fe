"""Tests for recommendation cache keys and TTL cache."""

from backend.app.models.recommendations import RecommendationRequest, RecommendationResponse
from backend.app.recommendations.cache import RecommendationCache, make_cache_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def request(**overrides: object) -> RecommendationRequest:
    values: dict[str, object] = {
        "destination": "Kandy",
        "budget": 100000,
        "duration": 3,
        "interests": ["culture", "food"],
    }
    values.update(overrides)
    return RecommendationRequest(**values)  # type: ignore[arg-type]


def test_budget_is_bucketed_to_nearest_ten_thousand() -> None:
    base = make_cache_key(request())

    assert make_cache_key(request(budget=104999)) == base
    assert make_cache_key(request(budget=95000)) == base
    assert make_cache_key(request(budget=105000)) != base


def test_key_ignores_interest_order_and_destination_case() -> None:
    base = make_cache_key(request())

    assert make_cache_key(request(interests=["food", "culture"])) == base
    assert make_cache_key(request(destination="  KANDY ")) == base


def test_key_changes_with_trip_shape() -> None:
    base = make_cache_key(request())

    assert make_cache_key(request(duration=4)) != base
    assert make_cache_key(request(group_size=4)) != base
    assert make_cache_key(request(exclude=["Kandy Lake"])) != base


def test_key_is_md5_hex() -> None:
    key = make_cache_key(request())

    assert len(key) == 32
    int(key, 16)


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = RecommendationCache(ttl_seconds=60, clock=clock)
    cache.set("k", RecommendationResponse(trip_summary="x"))

    clock.now = 59
    assert cache.get("k") is not None

    clock.now = 60
    assert cache.get("k") is None
    assert len(cache) == 0


def test_oldest_entry_evicted_when_full() -> None:
    cache = RecommendationCache(max_entries=2)
    for key in ("a", "b", "c"):
        cache.set(key, RecommendationResponse(trip_summary=key))

    assert cache.get("a") is None
    assert cache.get("c") is not None
    assert len(cache) == 2


def test_cached_responses_are_copies() -> None:
    cache = RecommendationCache()
    cache.set("k", RecommendationResponse(top_attractions=[{"name": "Sigiriya"}]))

    first = cache.get("k")
    assert first is not None
    first.top_attractions.append({"name": "Ella"})

    second = cache.get("k")
    assert second is not None
    assert len(second.top_attractions) == 1


def test_clear() -> None:
    cache = RecommendationCache()
    cache.set("k", RecommendationResponse())
    cache.clear()

    assert len(cache) == 0
