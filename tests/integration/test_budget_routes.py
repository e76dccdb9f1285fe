"""Integration tests for pricing and budget endpoints."""

from fastapi.testclient import TestClient


def test_price_known_attraction(client: TestClient) -> None:
    response = client.post("/pricing/price", json={"name": "Sigiriya Rock Fortress"})

    assert response.status_code == 200
    data = response.json()
    assert data["text"] == "LKR 50"
    assert data["isEstimate"] is False
    assert data["priceInfo"]["exact"] == 50


def test_price_estimate_from_camel_case_field(client: TestClient) -> None:
    response = client.post("/pricing/price", json={"name": "Boat Tour", "estimatedCost": 5000})

    data = response.json()
    assert data["text"] == "LKR 4,000 - 6,000"
    assert data["isEstimate"] is True


def test_categories(client: TestClient) -> None:
    data = client.get("/budget/categories").json()

    assert set(data) == {"accommodation", "food", "transportation", "activities", "misc"}
    assert data["accommodation"]["defaultPercentage"] == 35
    assert data["food"]["label"] == "Food & Dining"


def test_allocation(client: TestClient) -> None:
    response = client.post(
        "/budget/allocation",
        json={
            "totalBudget": 100000,
            "duration": 5,
            "groupSize": 2,
            "interests": ["adventure"],
            "savedItems": [{"name": "Curry House", "type": "restaurant", "cost": 2000}],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["categories"]["food"]["total"] == 21000
    assert data["percentages"]["activities"] == 20
    assert data["committedExpenses"] == 4000
    assert len(data["dailyBreakdown"]) == 5


def test_allocation_rejects_zero_duration(client: TestClient) -> None:
    response = client.post(
        "/budget/allocation", json={"totalBudget": 1000, "duration": 0, "groupSize": 1}
    )

    assert response.status_code == 422


def test_categorize(client: TestClient) -> None:
    response = client.post("/budget/categorize", json={"name": "Kottu Corner"})

    assert response.json()["category"] == "food"
    assert response.json()["info"]["label"] == "Food & Dining"


def test_fit_round_trips_allocation(client: TestClient) -> None:
    allocation = client.post(
        "/budget/allocation", json={"totalBudget": 100000, "duration": 5, "groupSize": 2}
    ).json()

    response = client.post(
        "/budget/fit",
        json={
            "item": {"name": "Whale watching", "cost": 20000},
            "currentAllocation": allocation,
            "category": "activities",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["fits"] is False
    assert data["overBudgetBy"] == 5000


def test_allocation_rejects_negative_cost(client: TestClient) -> None:
    response = client.post(
        "/budget/allocation",
        json={
            "totalBudget": 100000,
            "duration": 2,
            "groupSize": 2,
            "savedItems": [{"name": "Refund", "cost": -50000}],
        },
    )

    assert response.status_code == 422
