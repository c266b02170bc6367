"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fuel_ledger.adapters.fdc_client import HttpxFdcClient
from fuel_ledger.adapters.food_api_client import HttpxFoodApiClient
from fuel_ledger.adapters.off_client import HttpxOffClient
from fuel_ledger.adapters.supabase_kv_repository import SupabaseKeyValueRepository
from fuel_ledger.config import Settings
from fuel_ledger.services.cache import InMemoryCache
from fuel_ledger.services.controller import NutritionLedgerController
from fuel_ledger.services.food_search import FoodSearchService
from fuel_ledger.services.persistence import (
    FallbackKeyValueRepository,
    InMemoryKeyValueRepository,
    KeyValueDailyTrackingRepository,
    KeyValueRepository,
)
from fuel_ledger.services.remote_search import RemoteFoodGateway
from fuel_ledger.services.user_foods import UserFoodsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueRepository
    user_foods_service: UserFoodsService
    remote_gateway: RemoteFoodGateway
    ledger_controller: NutritionLedgerController
    food_search_service: FoodSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueRepository:
    """Create the key-value store, Supabase-backed when configured."""
    if settings.supabase_enabled:
        supabase_client = create_client(
            settings.supabase_url, settings.supabase_service_key
        )
        primary: KeyValueRepository = SupabaseKeyValueRepository(
            supabase_client, namespace=settings.ledger_namespace
        )
    else:
        primary = InMemoryKeyValueRepository()
    return FallbackKeyValueRepository(primary)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    tracking_repository = KeyValueDailyTrackingRepository(store)
    user_foods_service = UserFoodsService(
        store, recent_limit=resolved_settings.recent_foods_limit
    )
    food_api_client = HttpxFoodApiClient.create(
        resolved_settings.food_api_base_url,
        timeout_seconds=resolved_settings.food_api_timeout_seconds,
    )
    remote_gateway = RemoteFoodGateway(
        client=food_api_client,
        debounce_seconds=resolved_settings.search_debounce_seconds,
        min_query_length=resolved_settings.min_query_length,
    )
    ledger_controller = NutritionLedgerController(
        tracking=tracking_repository,
        store=store,
        user_foods=user_foods_service,
        gateway=remote_gateway,
    )
    fdc_client = (
        HttpxFdcClient.create(
            api_key=resolved_settings.fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
        )
        if resolved_settings.fdc_api_key
        else None
    )
    off_client = HttpxOffClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
    )
    food_search_service = FoodSearchService(
        fdc_client=fdc_client,
        off_client=off_client,
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        remote_gateway.close()
        await food_api_client.close()
        await off_client.close()
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        user_foods_service=user_foods_service,
        remote_gateway=remote_gateway,
        ledger_controller=ledger_controller,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )
