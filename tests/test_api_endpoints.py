"""Tests for HTTP endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from fastapi.testclient import TestClient

from menu_recommender.api.app import create_app
from menu_recommender.domain.combos import ComboFrequency
from menu_recommender.domain.orders import OrderLine, OrderNutrition, OrderRecord
from tests.conftest import make_item


def _seed(container) -> None:  # type: ignore[no-untyped-def]
    container.ingredient_service.catalog.items.extend(
        [
            make_item(
                1,
                item_name="Chicken Wrap",
                calories=450,
                protein=32,
                ingredients=("chicken", "lettuce"),
            ),
            make_item(
                2,
                item_name="Chicken Bowl",
                calories=650,
                protein=41,
                ingredients=("chicken", "rice"),
            ),
            make_item(3, item_name="Fries", calories=320, ingredients=("potato",)),
        ]
    )


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_recommend_endpoint(container, language_client) -> None:
    _seed(container)
    language_client.payload = {"protein": {"min": 30}}
    client = TestClient(create_app(container))

    response = client.post("/api/food/recommend", json={"query": "high protein"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["criteria"] == {"protein": {"min": 30.0}}
    assert [r["item"] for r in data["recommendations"]] == [
        "Chicken Bowl",
        "Chicken Wrap",
    ]
    assert data["recommendations"][0]["totalFat"] is None
    assert data["count"] == 2
    assert data["usedFallback"] is False


def test_recommend_endpoint_passes_previous_criteria(
    container, language_client
) -> None:
    _seed(container)
    language_client.payload = {"protein": {"min": 30}, "sort": "price_asc"}
    client = TestClient(create_app(container))

    response = client.post(
        "/api/food/recommend",
        json={"query": "cheaper", "previousCriteria": {"protein": {"min": 30}}},
    )

    assert response.status_code == 200
    assert [r["price"] for r in response.json()["recommendations"]] == [4.5, 6.5]
    assert "Previous criteria" in language_client.prompts[-1]


def test_recommend_endpoint_validation(container) -> None:
    client = TestClient(create_app(container))

    missing = client.post("/api/food/recommend", json={})
    malformed = client.post("/api/food/recommend", content=b"not json")

    assert missing.status_code == 400
    assert missing.json() == {
        "success": False,
        "message": "Query parameter is required and must be a string",
    }
    assert malformed.status_code == 400
    assert malformed.json()["success"] is False


def test_ingredient_endpoint(container) -> None:
    _seed(container)
    client = TestClient(create_app(container))

    response = client.get(
        "/api/recommendations/ingredients",
        params={"include": "chicken,lettuce", "exclude": "rice", "limit": "500"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["criteria"] == {"include": ["chicken", "lettuce"], "exclude": ["rice"]}
    assert data["limit"] == 100
    assert data["page"] == 1
    assert data["total"] == 1
    assert data["items"][0]["matchScore"] == 2


def test_combo_endpoint(container) -> None:
    _seed(container)
    combos = container.combo_service.combos
    combos.rows.append(
        ComboFrequency(
            main_item_id=UUID(int=1),
            complementary_item_id=UUID(int=3),
            frequency=12,
            popularity=300,
        )
    )
    client = TestClient(create_app(container))

    response = client.get(
        "/api/food/combo-suggestions",
        params={"mainItemId": str(UUID(int=1)), "preferences": '{"lowSodium": true}'},
    )
    fallback = client.get(
        "/api/food/combo-suggestions", params={"mainItemId": str(UUID(int=2))}
    )
    invalid = client.get("/api/food/combo-suggestions", params={"mainItemId": "x"})

    assert response.status_code == 200
    suggestion = response.json()["suggestions"][0]
    assert suggestion["reason"] == "popular_together"
    assert suggestion["popularityScore"] == 0.3
    assert suggestion["item"]["item"] == "Fries"
    assert suggestion["frequency"] == 12
    assert suggestion["popularity"] == 300
    assert {s["reason"] for s in fallback.json()["suggestions"]} == {
        "same_vendor_fallback"
    }
    assert fallback.json()["count"] == 2
    for entry in fallback.json()["suggestions"]:
        assert "frequency" not in entry
        assert "popularity" not in entry
    assert invalid.status_code == 400


def test_order_insights_endpoint(container) -> None:
    user_id = UUID(int=5)
    orders = container.analytics_service.repository
    now = datetime.now(tz=UTC)
    orders.orders.extend(
        OrderRecord(
            id=UUID(int=100 + offset),
            user_id=user_id,
            status="completed",
            created_at=now - timedelta(days=offset),
            nutrition=OrderNutrition(total_calories=800, total_protein=20),
            lines=(OrderLine(restaurant="Taco Stop", item="Burrito"),),
        )
        for offset in (1, 3)
    )
    client = TestClient(create_app(container))

    response = client.get("/api/orders/insights", params={"userId": str(user_id)})
    invalid = client.get("/api/orders/insights", params={"userId": "nope"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["patterns"]["totalOrders"] == 2
    assert data["patterns"]["mostOrderedRestaurants"] == [
        {"name": "Taco Stop", "count": 2}
    ]
    assert len(data["trends"]["trends"]) == 2
    assert data["recommendations"][0]["type"] == "protein_increase"
    assert invalid.status_code == 400
    assert invalid.json() == {"success": False, "message": "Invalid user ID"}
