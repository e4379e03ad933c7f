"""HTTP surface: wardrobe, scoring, recommendations, saved outfits and try-on."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from models.context import WeatherContext
from server.api import create_app
from stylisto_app.app import StylistoApp
from stylisto_app.config import StylistoConfig
from tools.virtual_tryon_client import TIMEOUT_ERROR, TryOnRequest, TryOnResponse, VirtualTryOnClient
from tools.weather_provider import MockWeatherProvider

USER = "user-1"


class _ScriptedTryOnClient(VirtualTryOnClient):
    """Replays a fixed response instead of calling a try-on server."""

    def __init__(self, response: TryOnResponse) -> None:
        super().__init__(base_url="http://tryon.test")
        self.response = response
        self.requests: list[TryOnRequest] = []

    def process_virtual_tryon(self, request: TryOnRequest) -> TryOnResponse:
        self.requests.append(request)
        return self.response


@pytest.fixture()
def tryon_client() -> _ScriptedTryOnClient:
    return _ScriptedTryOnClient(TryOnResponse(success=True, result_image="R0VO", processing_time=1800))


@pytest.fixture()
def client(tmp_path: Path, tryon_client: _ScriptedTryOnClient) -> TestClient:
    stylisto = StylistoApp(
        StylistoConfig(database_path=str(tmp_path / "api.db"), default_location="Amsterdam"),
        weather_provider=MockWeatherProvider(WeatherContext(temperature=9, condition="cloudy")),
        tryon_client=tryon_client,
    )
    return TestClient(create_app(stylisto))


def _seed(client: TestClient) -> dict:
    ids = {}
    for key, payload in {
        "shirt": {"name": "White Shirt", "category": "tops", "color": "#FFFFFF", "occasion": ["work"]},
        "trousers": {"name": "Navy Trousers", "category": "bottoms", "color": "#1F2A44", "occasion": ["work"]},
        "loafers": {"name": "Loafers", "category": "shoes", "color": "#6B4226", "occasion": ["work"]},
        "coat": {"name": "Wool Coat", "category": "outerwear", "color": "#2C3E70", "season": ["winter"]},
    }.items():
        response = client.post(
            "/items",
            json={"user_id": USER, "image_url": f"data:image/png;base64,{key.upper()}", **payload},
        )
        assert response.status_code == 201
        ids[key] = response.json()["item"]["id"]
    return ids


def test_healthz(client: TestClient) -> None:
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["x-correlation-id"]


def test_correlation_id_is_echoed(client: TestClient) -> None:
    response = client.get("/healthz", headers={"x-correlation-id": "trace-42"})
    assert response.headers["x-correlation-id"] == "trace-42"


def test_items_are_listed_and_filtered(client: TestClient) -> None:
    _seed(client)
    all_items = client.get("/items", params={"user_id": USER}).json()["items"]
    assert len(all_items) == 4
    shoes = client.get("/items", params={"user_id": USER, "category": "shoes"}).json()["items"]
    assert [item["name"] for item in shoes] == ["Loafers"]
    assert client.get("/items", params={"user_id": "someone-else"}).json()["items"] == []


def test_empty_outfit_score_is_rejected(client: TestClient) -> None:
    response = client.post("/outfits/score", json={})
    assert response.status_code == 422
    assert response.json()["status"] == "error"


def test_score_stored_and_inline_items(client: TestClient) -> None:
    ids = _seed(client)
    response = client.post(
        "/outfits/score",
        json={
            "user_id": USER,
            "item_ids": [ids["shirt"], ids["trousers"]],
            "items": [{"user_id": USER, "name": "Sneakers", "category": "shoes", "color": "#FFFFFF"}],
            "occasion": "work",
            "weather": {"temperature": 22, "condition": "clear"},
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert 0.0 <= body["score"]["total"] <= 1.0
    assert body["score"]["breakdown"]["weather_suitability"] is not None
    assert body["score"]["breakdown"]["user_preference"] is None
    assert body["completeness"]["is_complete"] is True


def test_score_unknown_item_ids(client: TestClient) -> None:
    response = client.post("/outfits/score", json={"user_id": USER, "item_ids": ["nope"]})
    assert response.status_code == 404
    assert response.json()["item_ids"] == ["nope"]


def test_recommendations_use_forecast_and_cards(client: TestClient) -> None:
    _seed(client)
    response = client.post("/recommendations", json={"user_id": USER, "occasion": "work", "min_score": 0.0})
    assert response.status_code == 200
    body = response.json()
    assert body["weather"]["condition"] == "cloudy"
    assert body["outfits"]
    first = body["outfits"][0]
    assert first["card"]["match_score"] == round(first["score"]["total"] * 100)
    assert first["card"]["primary_item"]["category"] == "tops"
    totals = [outfit["score"]["total"] for outfit in body["outfits"]]
    assert totals == sorted(totals, reverse=True)


def test_recommendations_reject_unknown_occasion(client: TestClient) -> None:
    response = client.post("/recommendations", json={"user_id": USER, "occasion": "moon landing"})
    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "needs_review"
    assert body["details"][0]["loc"][-1] == "occasion"


def test_saved_outfit_lifecycle(client: TestClient) -> None:
    ids = _seed(client)
    response = client.post("/outfits", json={"user_id": USER, "item_ids": [ids["shirt"], ids["trousers"]]})
    assert response.status_code == 201
    outfit = response.json()["outfit"]
    assert outfit["name"]
    assert outfit["source_type"] == "ai_generated"

    second = client.post("/outfits", json={"user_id": USER, "item_ids": [ids["trousers"], ids["shirt"]]}).json()
    assert second["outfit"]["name"] != outfit["name"]

    toggle = client.post(f"/outfits/{outfit['id']}/favorite", json={"user_id": USER})
    assert toggle.json()["is_favorite"] is True
    favorites = client.get("/outfits", params={"user_id": USER, "favorites_only": True}).json()["outfits"]
    assert [saved["id"] for saved in favorites] == [outfit["id"]]
    toggle = client.post(f"/outfits/{outfit['id']}/favorite", json={"user_id": USER})
    assert toggle.json()["is_favorite"] is False

    assert client.post("/outfits/missing/favorite", json={"user_id": USER}).status_code == 404
    assert client.delete(f"/outfits/{outfit['id']}", params={"user_id": USER}).status_code == 200
    assert client.delete(f"/outfits/{outfit['id']}", params={"user_id": USER}).status_code == 404
    remaining = client.get("/outfits", params={"user_id": USER}).json()["outfits"]
    assert [saved["id"] for saved in remaining] == [second["outfit"]["id"]]


def test_save_outfit_with_foreign_items(client: TestClient) -> None:
    ids = _seed(client)
    response = client.post("/outfits", json={"user_id": "intruder", "item_ids": [ids["shirt"]]})
    assert response.status_code == 404


def test_tryon_success_is_persisted(client: TestClient, tryon_client: _ScriptedTryOnClient) -> None:
    ids = _seed(client)
    outfit = client.post(
        "/outfits", json={"user_id": USER, "item_ids": [ids["shirt"], ids["trousers"]], "name": "Monday"}
    ).json()["outfit"]

    response = client.post(
        "/tryon",
        json={"user_id": USER, "outfit_id": outfit["id"], "user_image_url": "data:image/jpeg;base64,TUU="},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["result"]["prompt_used"] == "Virtual try-on for Monday"
    assert tryon_client.requests[0].clothing_images == ["SHIRT", "TROUSERS"]

    results = client.get("/tryon", params={"user_id": USER, "outfit_id": outfit["id"]}).json()["results"]
    assert [result["id"] for result in results] == [body["result"]["id"]]
    result_id = body["result"]["id"]
    assert client.delete(f"/tryon/{result_id}", params={"user_id": USER}).status_code == 200
    assert client.get("/tryon", params={"user_id": USER}).json()["results"] == []


def test_tryon_failure_returns_bad_gateway(client: TestClient, tryon_client: _ScriptedTryOnClient) -> None:
    tryon_client.response = TryOnResponse(success=False, error=TIMEOUT_ERROR)
    ids = _seed(client)
    outfit = client.post("/outfits", json={"user_id": USER, "item_ids": [ids["shirt"]]}).json()["outfit"]

    response = client.post(
        "/tryon",
        json={"user_id": USER, "outfit_id": outfit["id"], "user_image_url": "data:image/jpeg;base64,TUU="},
    )
    assert response.status_code == 502
    assert response.json() == {
        "status": "error",
        "success": False,
        "result": None,
        "message": TIMEOUT_ERROR,
        "used_mock": False,
    }
    assert client.get("/tryon", params={"user_id": USER}).json()["results"] == []


def test_tryon_mode_is_validated(client: TestClient) -> None:
    response = client.post(
        "/tryon",
        json={"user_id": USER, "outfit_id": "x", "user_image_url": "data:,", "mode": "batch"},
    )
    assert response.status_code == 422
