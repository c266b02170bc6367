"""Tests for container wiring."""

import asyncio

from fuel_ledger.config import Settings
from fuel_ledger.containers import build_container, build_store
from fuel_ledger.services.persistence import (
    FallbackKeyValueRepository,
    InMemoryKeyValueRepository,
)


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.ledger_controller.gateway is container.remote_gateway
    assert container.food_search_service.fdc_client is not None
    assert container.remote_gateway.debounce_seconds == settings.search_debounce_seconds
    asyncio.run(container.close_resources())


def test_build_container_without_fdc_key() -> None:
    container = build_container(Settings(fdc_api_key=None))

    assert container.food_search_service.fdc_client is None
    asyncio.run(container.close_resources())


def test_build_store_defaults_to_memory(settings: Settings) -> None:
    store = build_store(settings)

    assert isinstance(store, FallbackKeyValueRepository)
    assert isinstance(store.primary, InMemoryKeyValueRepository)
