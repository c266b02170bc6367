"""Shared test fixtures."""

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from fuel_ledger.adapters.fdc_client import FdcClient
from fuel_ledger.adapters.food_api_client import FoodApiClient
from fuel_ledger.adapters.off_client import OffClient
from fuel_ledger.config import Settings
from fuel_ledger.containers import AppContainer
from fuel_ledger.domain.remote import Provider
from fuel_ledger.services.cache import InMemoryCache
from fuel_ledger.services.controller import NutritionLedgerController
from fuel_ledger.services.food_search import FoodSearchService
from fuel_ledger.services.ledger import LedgerStore
from fuel_ledger.services.persistence import (
    InMemoryKeyValueRepository,
    KeyValueDailyTrackingRepository,
    KeyValueRepository,
)
from fuel_ledger.services.remote_search import RemoteFoodGateway
from fuel_ledger.services.user_foods import UserFoodsService

DATE_KEY = "2026-10-16"


def banana_payload(name: str = "Banana") -> dict[str, object]:
    return {
        "id": "1105314",
        "name": name,
        "brand": "",
        "calories": 89,
        "protein": 1.1,
        "carbs": 22.8,
        "fat": 0.3,
        "fiber": 2.6,
        "sugar": 12.2,
        "sodium": 1,
        "servingSize": 118,
        "servingSizeLabel": "g",
    }


@dataclass
class FakeFoodApiClient(FoodApiClient):
    """Fake food endpoint client with scripted responses."""

    responses: dict[Provider, dict[str, object] | Exception] = field(
        default_factory=lambda: {
            Provider.PRIMARY: {"foods": [banana_payload()]},
            Provider.SECONDARY: {"foods": [banana_payload("Banana Chips")]},
        }
    )
    delays: dict[str, float] = field(default_factory=dict)
    barcode_response: object = field(
        default_factory=lambda: {"found": False}
    )
    calls: list[tuple[Provider, str]] = field(default_factory=list)
    barcode_calls: list[str] = field(default_factory=list)

    async def search_foods(self, provider: Provider, query: str) -> dict[str, object]:
        self.calls.append((provider, query))
        delay = self.delays.get(query)
        if delay:
            await asyncio.sleep(delay)
        response = self.responses[provider]
        if isinstance(response, Exception):
            raise response
        foods = [dict(food, name=f"{food['name']} [{query}]") for food in response["foods"]]
        return {"foods": foods}

    async def lookup_barcode(self, code: str) -> dict[str, object]:
        self.barcode_calls.append(code)
        if isinstance(self.barcode_response, Exception):
            raise self.barcode_response
        return self.barcode_response  # type: ignore[return-value]


@dataclass
class FailingKeyValueRepository(KeyValueRepository):
    """Store whose every call raises."""

    calls: int = 0

    def get(self, key: str) -> object | None:
        self.calls += 1
        raise OSError("disk unavailable")

    def set(self, key: str, value: object) -> None:
        self.calls += 1
        raise OSError("disk unavailable")


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with an in-memory search payload."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 1105314,
                    "description": "Bananas, ripe and slightly ripe, raw",
                    "dataType": "Foundation",
                    "foodNutrients": [
                        {"nutrientId": 1008, "value": 97.0},
                        {"nutrientId": 1003, "value": 0.74},
                        {"nutrientId": 1005, "value": 23.66},
                        {"nutrientId": 1004, "value": 0.29},
                        {"nutrientId": 1079, "value": 1.7},
                        {"nutrientId": 1063, "value": 15.8},
                        {"nutrientId": 1093, "value": 1.0},
                    ],
                }
            ]
        }
    )
    error: Exception | None = None
    search_calls: int = 0

    async def search_foods(self, query: str, page_size: int = 20) -> dict[str, object]:
        self.search_calls += 1
        if self.error is not None:
            raise self.error
        return self.search_payload


@dataclass
class FakeOffClient(OffClient):
    """Fake Open Food Facts client."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "products": [
                {
                    "code": "0001",
                    "product_name": "Diet Soda",
                    "brands": "Fizz",
                    "nutriments": {"energy-kcal_100g": 0},
                },
                {
                    "code": "0002",
                    "product_name": "Plain Water Crackers",
                    "brands": "Bakery",
                    "nutriments": {"energy-kcal_100g": 400},
                },
                {
                    "code": "0003",
                    "product_name": "Orange Juice",
                    "brands": "Sunny",
                    "nutriments": {
                        "energy-kcal_100g": 45,
                        "carbohydrates_100g": 10.4,
                        "proteins_100g": 0.7,
                        "sugars_100g": 8.4,
                        "sodium_100g": 0.001,
                    },
                    "serving_quantity": 240,
                    "serving_size": "1 cup (240 ml)",
                },
                {"code": "0004", "product_name": "  ", "nutriments": {}},
            ]
        }
    )
    product_payload: dict[str, object] = field(
        default_factory=lambda: {
            "status": 1,
            "product": {
                "code": "5449000000996",
                "product_name": "Sports Drink",
                "brands": "Hydra",
                "nutriments": {
                    "energy-kcal_100g": 24,
                    "carbohydrates_100g": 6,
                    "sugars_100g": 6,
                    "sodium_100g": 0.05,
                },
                "serving_quantity": "500",
                "serving_size": "500 ml",
            },
        }
    )
    error: Exception | None = None

    async def search_products(
        self, query: str, page_size: int = 15
    ) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return self.search_payload

    async def get_product(self, barcode: str) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return self.product_payload


class RecordingHandler(logging.Handler):
    """Handler that keeps every record it receives."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int = logging.DEBUG) -> list[str]:
        return [
            record.getMessage() for record in self.records if record.levelno >= level
        ]


@pytest.fixture
def log_records() -> Iterator[RecordingHandler]:
    """Record everything logged under the fuel_ledger logger."""
    logger = logging.getLogger("fuel_ledger")
    handler = RecordingHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        food_api_base_url="https://ledger.test",
        fdc_api_key="fdc-key",
        search_debounce_seconds=0.01,
    )


@pytest.fixture
def store() -> InMemoryKeyValueRepository:
    return InMemoryKeyValueRepository()


@pytest.fixture
def tracking(store: InMemoryKeyValueRepository) -> KeyValueDailyTrackingRepository:
    return KeyValueDailyTrackingRepository(store)


@pytest.fixture
def ledger(
    store: InMemoryKeyValueRepository, tracking: KeyValueDailyTrackingRepository
) -> LedgerStore:
    return LedgerStore(date_key=DATE_KEY, tracking=tracking, store=store)


@pytest.fixture
def food_api_client() -> FakeFoodApiClient:
    return FakeFoodApiClient()


@pytest.fixture
def user_foods(store: InMemoryKeyValueRepository) -> UserFoodsService:
    return UserFoodsService(store)


@pytest.fixture
def controller(
    store: InMemoryKeyValueRepository,
    tracking: KeyValueDailyTrackingRepository,
    user_foods: UserFoodsService,
    food_api_client: FakeFoodApiClient,
) -> NutritionLedgerController:
    return NutritionLedgerController(
        tracking=tracking,
        store=store,
        user_foods=user_foods,
        gateway=RemoteFoodGateway(client=food_api_client, debounce_seconds=0.01),
        date_key=DATE_KEY,
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def off_client() -> FakeOffClient:
    return FakeOffClient()


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueRepository,
    controller: NutritionLedgerController,
    user_foods: UserFoodsService,
    fdc_client: FakeFdcClient,
    off_client: FakeOffClient,
) -> AppContainer:
    food_search_service = FoodSearchService(
        fdc_client=fdc_client,
        off_client=off_client,
        cache=InMemoryCache(),
        retry_attempts=0,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        user_foods_service=user_foods,
        remote_gateway=controller.gateway,
        ledger_controller=controller,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )
