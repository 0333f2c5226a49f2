"""Tests for the HTTP API."""

import base64

from fastapi.testclient import TestClient

from menu_advisor.api.app import create_app
from tests.conftest import (
    LOOKUP_RESPONSE,
    NEARBY_RESPONSE,
    RECOMMENDATION_RESPONSE,
)


def test_health_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_initial_state(container) -> None:
    client = TestClient(create_app(container))

    data = client.get("/state").json()

    assert data["state"] == "IDLE"
    assert data["busy"] is False
    assert data["loading_message"] is None
    assert data["location"]["location"] == ""


def test_search_and_analyze_flow(container, model_client) -> None:
    model_client.responses.extend([LOOKUP_RESPONSE, RECOMMENDATION_RESPONSE])
    client = TestClient(create_app(container))

    client.post("/location/manual", json={"location": "Atlanta, GA"})
    client.post("/profile/flags/gluten_free")
    searched = client.post("/restaurants/search", json={"name": "Joe's"})

    assert searched.status_code == 200
    assert searched.json()["state"] == "CONFIRMING_RESTAURANT"
    assert searched.json()["restaurant"]["name"] == "Joe's Diner"
    assert '"Atlanta, GA"' in model_client.calls[0]["prompt"]

    analyzed = client.post("/analyze")
    data = analyzed.json()

    assert data["state"] == "SHOWING_RESULTS"
    assert [item["name"] for item in data["results"]["safe"]] == [
        "Grilled Chicken",
        "Baked Cod",
    ]
    assert data["results"]["ingredientsFound"] is False
    assert "Gluten-Free" in model_client.calls[1]["prompt"]

    restarted = client.post("/restart")
    assert restarted.json()["state"] == "IDLE"


def test_invalid_transition_returns_conflict(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/analyze")

    assert response.status_code == 409
    assert container.workflow.state == "IDLE"


def test_missing_location_is_reported_in_state(container, model_client) -> None:
    client = TestClient(create_app(container))

    data = client.post("/restaurants/search", json={"name": "Joe's"}).json()

    assert data["state"] == "IDLE"
    assert data["error"] == "Please enter a location or detect your current one."
    assert model_client.calls == []


def test_nearby_then_select(container, model_client) -> None:
    model_client.responses.extend([NEARBY_RESPONSE, LOOKUP_RESPONSE])
    client = TestClient(create_app(container))

    nearby = client.post(
        "/nearby", json={"location": "Atlanta, GA", "radius_miles": 3}
    ).json()
    assert [item["name"] for item in nearby["nearby"]] == ["Joe's Diner", "Green Bowl"]

    selected = client.post(
        "/restaurants/select", json={"restaurant": nearby["nearby"][0]}
    ).json()
    assert selected["state"] == "CONFIRMING_RESTAURANT"
    assert '"12 Main St, Atlanta, GA"' in model_client.calls[1]["prompt"]


def test_photo_analysis_and_cancel(container, model_client) -> None:
    model_client.responses.extend([LOOKUP_RESPONSE, RECOMMENDATION_RESPONSE])
    client = TestClient(create_app(container))
    client.post("/restaurants/search", json={"name": "Joe's", "location": "Atlanta"})

    cancelled = client.post("/analyze/photo", json={"cancelled": True}).json()
    assert cancelled["state"] == "CONFIRMING_RESTAURANT"
    assert cancelled["error"] is None
    assert len(model_client.calls) == 1

    image = base64.b64encode(b"\x89PNG\r\n\x1a\nmenu").decode("ascii")
    analyzed = client.post(
        "/analyze/photo", json={"image_base64": f"data:image/png;base64,{image}"}
    ).json()
    assert analyzed["state"] == "SHOWING_RESULTS"
    assert model_client.calls[1]["image_data_url"].startswith("data:image/png;base64,")


def test_photo_with_invalid_base64_is_rejected(container, model_client) -> None:
    model_client.responses.append(LOOKUP_RESPONSE)
    client = TestClient(create_app(container))
    client.post("/restaurants/search", json={"name": "Joe's", "location": "Atlanta"})

    response = client.post("/analyze/photo", json={"image_base64": "@@not-base64@@"})

    assert response.status_code == 422


def test_profile_endpoints(container, preferences_repository) -> None:
    client = TestClient(create_app(container))

    client.post("/profile/flags/vegan")
    client.post("/profile/allergies/Soy")
    other = client.put("/profile/other", json={"text": "No cilantro"}).json()

    assert other["vegan"] is True
    assert other["allergies"] == ["Soy"]
    assert other["other"] == "No cilantro"
    assert "restrictions" in preferences_repository.records

    data = client.get("/profile").json()
    assert data["profile"]["glutenFree"] is False
    assert "Peanuts" in data["allergy_options"]

    assert client.post("/profile/flags/paleo").status_code == 422


def test_replace_profile_accepts_camel_case(container) -> None:
    client = TestClient(create_app(container))

    response = client.put("/profile", json={"dairyFree": True, "allergies": ["Milk"]})

    assert response.status_code == 200
    assert response.json()["dairyFree"] is True
    assert container.preferences_service.profile.dairy_free is True


def test_theme_endpoint(container, preferences_repository) -> None:
    client = TestClient(create_app(container))

    assert client.put("/theme", json={"theme": "dark"}).json() == {"theme": "dark"}
    assert preferences_repository.records["theme"] == "dark"
    assert client.put("/theme", json={"theme": "neon"}).status_code == 422


def test_location_endpoints(container, model_client) -> None:
    model_client.responses.append("Marietta, GA")
    client = TestClient(create_app(container))

    denied = client.post("/location/error", json={"reason": "permission_denied"})
    assert denied.json()["error"].startswith("Location permission denied")

    detected = client.post(
        "/location/coordinates", json={"latitude": 33.95, "longitude": -84.55}
    ).json()
    assert detected["location"] == "Marietta, GA"
    assert detected["error"] is None

    manual = client.post("/location/manual", json={"location": "Athens, GA"}).json()
    assert manual["manual"] is True

    late = client.post(
        "/location/coordinates", json={"latitude": 1.0, "longitude": 2.0}
    ).json()
    assert late["location"] == "Athens, GA"
    assert len(model_client.calls) == 1


def test_favorites_toggle_and_list(container, model_client) -> None:
    model_client.responses.append(LOOKUP_RESPONSE)
    client = TestClient(create_app(container))
    item = {"name": "Baked Cod", "reason": "White fish"}

    missing = client.post("/favorites/toggle", json={"item": item})
    assert missing.status_code == 422

    client.post("/restaurants/search", json={"name": "Joe's", "location": "Atlanta"})
    saved = client.post("/favorites/toggle", json={"item": item}).json()
    assert saved == {"saved": True, "restaurant_name": "Joe's Diner"}

    client.post(
        "/favorites/toggle",
        json={"item": {"name": "Salad"}, "restaurant_name": "Green Bowl"},
    )
    recent = client.get("/favorites", params={"limit": 1}).json()["favorites"]
    assert [entry["restaurantName"] for entry in recent] == ["Green Bowl"]

    removed = client.post("/favorites/toggle", json={"item": item}).json()
    assert removed["saved"] is False
    remaining = client.get("/favorites").json()["favorites"]
    assert [entry["name"] for entry in remaining] == ["Salad"]


def test_search_again_resets_workflow(container, model_client) -> None:
    model_client.responses.append(LOOKUP_RESPONSE)
    client = TestClient(create_app(container))
    client.post("/restaurants/search", json={"name": "Joe's", "location": "Atlanta"})

    data = client.post("/search-again").json()

    assert data["state"] == "IDLE"
    assert data["restaurant"] is None
    assert data["menu"] is None
