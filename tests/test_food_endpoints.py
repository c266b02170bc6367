"""Tests for the food search endpoints."""

import httpx
from fastapi.testclient import TestClient

from fuel_ledger.api.app import create_app
from fuel_ledger.containers import AppContainer
from tests.conftest import FakeFdcClient, FakeOffClient


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_search_returns_primary_foods(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "banana"})

    assert response.status_code == 200
    foods = response.json()["foods"]
    assert foods[0]["id"] == "1105314"
    assert foods[0]["provider"] == "primary"
    assert foods[0]["carbs"] == 23.7
    assert foods[0]["servingSizeLabel"] == "g"


def test_short_query_returns_empty_list(
    container: AppContainer, fdc_client: FakeFdcClient
) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": " b "})

    assert response.status_code == 200
    assert response.json() == {"foods": []}
    assert fdc_client.search_calls == 0


def test_search_without_key_is_unavailable(container: AppContainer) -> None:
    container.food_search_service.fdc_client = None
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "banana"})

    assert response.status_code == 503
    assert response.json()["foods"] == []


def test_search_upstream_failure_is_bad_gateway(
    container: AppContainer, fdc_client: FakeFdcClient
) -> None:
    fdc_client.error = httpx.ConnectError("offline")
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "banana"})

    assert response.status_code == 502
    assert response.json() == {"error": "Primary provider error", "foods": []}


def test_alt_search_returns_rated_products(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/alt-search", params={"q": "juice"})

    assert response.status_code == 200
    names = [food["name"] for food in response.json()["foods"]]
    assert names == ["Orange Juice", "Plain Water Crackers"]


def test_alt_search_failure_is_bad_gateway(
    container: AppContainer, off_client: FakeOffClient
) -> None:
    off_client.error = httpx.ReadTimeout("slow")
    client = TestClient(create_app(container))

    response = client.get("/foods/alt-search", params={"q": "juice"})

    assert response.status_code == 502


def test_barcode_found(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/barcode", params={"code": "5449000000996"})

    payload = response.json()
    assert payload["found"] is True
    assert payload["food"]["name"] == "Sports Drink"
    assert payload["food"]["brand"] == "Hydra"
    assert payload["food"]["sodium"] == 50.0


def test_barcode_not_found(container: AppContainer, off_client: FakeOffClient) -> None:
    off_client.product_payload = {"status": 0, "status_verbose": "product not found"}
    client = TestClient(create_app(container))

    response = client.get("/foods/barcode", params={"code": "0000000000"})

    assert response.status_code == 200
    assert response.json() == {"found": False}


def test_barcode_too_short(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/barcode", params={"code": "12"})

    assert response.status_code == 400
    assert response.json()["found"] is False
