"""Integration tests for recommendation and chat endpoints."""

from collections.abc import Callable

from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.app.models.recommendations import (
    ChatRequest,
    ChatResponse,
    PackingListRequest,
    PackingListResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from backend.app.recommendations.cache import RecommendationCache
from backend.app.recommendations.client import DeterministicStubClient
from backend.app.recommendations.service import RecommendationService

KANDY = {"destination": "Kandy", "budget": 100000, "duration": 2, "interests": ["culture"]}
GALLE = {"destination": "Galle", "budget": 100000, "duration": 2}
PACKING = {"destination": "Mirissa", "duration": 4, "activities": ["beach", "whale watching"]}


class FailingClient:
    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        raise RuntimeError("provider down")

    async def chat(self, request: ChatRequest) -> ChatResponse:
        raise RuntimeError("provider down")

    async def packing_list(self, request: PackingListRequest) -> PackingListResponse:
        raise RuntimeError("provider down")


def test_fresh_fetch_uses_stub(client: TestClient, guest_headers: dict[str, str]) -> None:
    response = client.post("/recommendations", json=KANDY, headers=guest_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "stub"
    assert data["fromCache"] is False
    assert data["topAttractions"]


def test_cache_hit_does_not_use_quota(client: TestClient, guest_headers: dict[str, str]) -> None:
    client.post("/recommendations", json=KANDY, headers=guest_headers)

    # Same trip with a budget in the same bucket
    response = client.post(
        "/recommendations", json={**KANDY, "budget": 102000}, headers=guest_headers
    )

    assert response.status_code == 200
    assert response.json()["fromCache"] is True
    access = client.get("/access/aiRecommendations", headers=guest_headers).json()
    assert access["remaining"] == 0


def test_guest_quota_exhausted_suggests_cache(
    client: TestClient, guest_headers: dict[str, str]
) -> None:
    client.post("/recommendations", json=KANDY, headers=guest_headers)

    response = client.post("/recommendations", json=GALLE, headers=guest_headers)

    assert response.status_code == 429
    detail = response.json()["detail"]
    assert detail["state"] == "denied-quota-exhausted"
    assert detail["useCache"] is True
    assert detail["showUpgrade"] is True
    assert detail["limitReached"] is True


def test_force_refresh_uses_quota(client: TestClient, guest_headers: dict[str, str]) -> None:
    client.post("/recommendations", json=KANDY, headers=guest_headers)

    response = client.post(
        "/recommendations", params={"force_refresh": "true"}, json=KANDY, headers=guest_headers
    )

    assert response.status_code == 429


def test_signed_in_user_daily_quota(client: TestClient, user_headers: dict[str, str]) -> None:
    for i in range(5):
        body = {**KANDY, "destination": f"Town {i}"}
        assert client.post("/recommendations", json=body, headers=user_headers).status_code == 200

    response = client.post("/recommendations", json=GALLE, headers=user_headers)

    assert response.status_code == 429
    assert "useCache" in response.json()["detail"]
    assert "limitReached" not in response.json()["detail"]


def test_failed_fetch_gives_quota_back(
    app: FastAPI, client: TestClient, guest_headers: dict[str, str]
) -> None:
    app.state.recommendations = RecommendationService(FailingClient(), RecommendationCache())

    response = client.post("/recommendations", json=KANDY, headers=guest_headers)

    assert response.status_code == 502
    access = client.get("/access/aiRecommendations", headers=guest_headers).json()
    assert access["remaining"] == 1


def test_chat_quota(client: TestClient, guest_headers: dict[str, str]) -> None:
    for _ in range(3):
        response = client.post(
            "/recommendations/chat", json={"message": "Where to eat?"}, headers=guest_headers
        )
        assert response.status_code == 200
        assert response.json()["source"] == "stub"

    response = client.post(
        "/recommendations/chat", json={"message": "Where to eat?"}, headers=guest_headers
    )

    assert response.status_code == 429
    assert response.json()["detail"]["reason"] == "Sign in for unlimited AI chat assistance"


def test_chat_rejects_empty_message(client: TestClient, guest_headers: dict[str, str]) -> None:
    response = client.post("/recommendations/chat", json={"message": ""}, headers=guest_headers)

    assert response.status_code == 422


def test_rate_limit_returns_retry_after(
    app_factory: Callable[..., FastAPI], user_headers: dict[str, str]
) -> None:
    client = TestClient(app_factory(ai_requests_per_min=2))

    for _ in range(2):
        client.post("/recommendations/chat", json={"message": "Hi"}, headers=user_headers)

    response = client.post("/recommendations/chat", json={"message": "Hi"}, headers=user_headers)

    assert response.status_code == 429
    assert response.json()["detail"] == "Too many requests. Please slow down."
    assert int(response.headers["Retry-After"]) > 0


def test_dev_mode_skips_quota(
    app_factory: Callable[..., FastAPI], guest_headers: dict[str, str]
) -> None:
    client = TestClient(app_factory(dev_mode=True))

    for destination in ("Kandy", "Galle", "Ella"):
        body = {**KANDY, "destination": destination}
        assert client.post("/recommendations", json=body, headers=guest_headers).status_code == 200


def test_failed_chat_gives_quota_back(
    app: FastAPI, client: TestClient, guest_headers: dict[str, str]
) -> None:
    app.state.recommendations = RecommendationService(FailingClient(), RecommendationCache())

    response = client.post(
        "/recommendations/chat", json={"message": "Where to eat?"}, headers=guest_headers
    )

    assert response.status_code == 502
    access = client.get("/access/aiChat", headers=guest_headers).json()
    assert access["remaining"] == 3


def test_packing_list_for_signed_in_user(client: TestClient, user_headers: dict[str, str]) -> None:
    response = client.post(
        "/recommendations/packing-list",
        json={**PACKING, "weather": {"condition": "Light rain"}},
        headers=user_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "stub"
    assert data["remaining"] == 2
    categories = {c["name"]: c["items"] for c in data["packingList"]["categories"]}
    assert "Swimwear" in categories["clothing"]
    assert "Compact umbrella" in categories["weather"]
    assert data["packingList"]["weatherTip"]
    assert data["packingList"]["tips"]


def test_packing_list_three_generations_per_trip(
    client: TestClient, user_headers: dict[str, str]
) -> None:
    body = {**PACKING, "tripId": "trip-1"}
    for expected in (2, 1, 0):
        response = client.post("/recommendations/packing-list", json=body, headers=user_headers)
        assert response.json()["remaining"] == expected

    response = client.post("/recommendations/packing-list", json=body, headers=user_headers)

    assert response.status_code == 429
    assert response.json()["detail"]["reason"] == "Maximum regenerations reached for this trip"

    # Another trip has its own allowance
    other = client.post(
        "/recommendations/packing-list", json={**body, "tripId": "trip-2"}, headers=user_headers
    )
    assert other.status_code == 200


def test_packing_list_requires_sign_in(client: TestClient, guest_headers: dict[str, str]) -> None:
    response = client.post("/recommendations/packing-list", json=PACKING, headers=guest_headers)

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["state"] == "denied-feature-disabled"
    assert detail["canGenerate"] is False
    assert detail["reason"] == "Sign in to generate personalized packing lists"


def test_failed_packing_list_gives_generation_back(
    app: FastAPI, client: TestClient, user_headers: dict[str, str]
) -> None:
    app.state.recommendations = RecommendationService(FailingClient(), RecommendationCache())

    for _ in range(4):
        response = client.post("/recommendations/packing-list", json=PACKING, headers=user_headers)
        assert response.status_code == 502

    app.state.recommendations = RecommendationService(DeterministicStubClient(), RecommendationCache())
    response = client.post("/recommendations/packing-list", json=PACKING, headers=user_headers)

    assert response.status_code == 200
    assert response.json()["remaining"] == 2
