"""Upstream food lookups normalised to per-100g records."""

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from fuel_ledger.adapters.fdc_client import FdcClient
from fuel_ledger.adapters.off_client import OffClient
from fuel_ledger.domain.remote import NutrientProfile, Provider, RemoteFoodRecord
from fuel_ledger.services.cache import Cache

_FDC_NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "carbs": 1005,
    "fat": 1004,
    "fiber": 1079,
    "sugar_branded": 2000,
    "sugar": 1063,
    "sodium": 1093,
}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class PrimarySearchUnavailableError(Exception):
    """Raised when the primary provider has no credentials configured."""


class DataQuality(StrEnum):
    """How complete a packaged product's nutrition panel is."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    POOR = "poor"


@dataclass
class FoodSearchService:
    """Service backing the food endpoints, with caching and a short retry."""

    fdc_client: FdcClient | None
    off_client: OffClient
    cache: Cache
    search_ttl_seconds: int = 3600
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search_primary(self, query: str) -> list[RemoteFoodRecord]:
        """Search whole foods in FoodData Central."""
        if self.fdc_client is None:
            raise PrimarySearchUnavailableError("FDC API key not configured")
        fdc_client = self.fdc_client
        cache_key = f"fdc:search:{query.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: fdc_client.search_foods(query), action="fdc_search"
        )
        foods = [
            _fdc_record(food)
            for food in payload.get("foods") or []
            if isinstance(food, dict)
        ]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        return foods

    async def search_secondary(self, query: str) -> list[RemoteFoodRecord]:
        """Search packaged products in Open Food Facts, best data first."""
        cache_key = f"off:search:{query.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.off_client.search_products(query), action="off_search"
        )
        rated: list[tuple[RemoteFoodRecord, DataQuality]] = []
        for product in payload.get("products") or []:
            if not isinstance(product, dict):
                continue
            if not str(product.get("product_name") or "").strip():
                continue
            record = _off_record(product, fallback_code="")
            quality = data_quality(record.per_100g)
            if quality is not DataQuality.POOR:
                rated.append((record, quality))
        # stable sort keeps upstream order within each quality band
        rated.sort(key=lambda pair: pair[1] is not DataQuality.COMPLETE)
        foods = [record for record, _quality in rated]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        return foods

    async def lookup_barcode(self, code: str) -> RemoteFoodRecord | None:
        """Return the product for a barcode, or None when unknown."""
        payload = await self._call_with_retry(
            lambda: self.off_client.get_product(code), action=f"off_barcode:{code}"
        )
        product = payload.get("product")
        if payload.get("status") != 1 or not isinstance(product, dict):
            return None
        if not product.get("product_name"):
            return None
        return _off_record(product, fallback_code=code)

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Food lookup %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def data_quality(nutrients: NutrientProfile) -> DataQuality:
    """Rate a product by which key macros it reports."""
    if nutrients.calories > 0:
        if nutrients.protein > 0 or nutrients.carbs > 0:
            return DataQuality.COMPLETE
        return DataQuality.PARTIAL
    return DataQuality.POOR


def status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _round1(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    return round(float(value), 1)


def _fdc_record(food: dict[str, object]) -> RemoteFoodRecord:
    values: dict[int, object] = {}
    for row in food.get("foodNutrients") or []:
        if not isinstance(row, dict):
            continue
        nutrient_info = row.get("nutrient") or {}
        nutrient_id = row.get("nutrientId") or nutrient_info.get("id")
        amount = row.get("value", row.get("amount"))
        if isinstance(nutrient_id, int) and amount is not None:
            values[nutrient_id] = amount

    def nutrient(name: str) -> float:
        return _round1(values.get(_FDC_NUTRIENT_IDS[name]))

    serving = food.get("servingSize")
    return RemoteFoodRecord(
        id=str(food.get("fdcId", "")),
        name=str(food.get("description", "")),
        provider=Provider.PRIMARY,
        per_100g=NutrientProfile(
            calories=nutrient("calories"),
            protein=nutrient("protein"),
            carbs=nutrient("carbs"),
            fat=nutrient("fat"),
            fiber=nutrient("fiber"),
            sugar=nutrient("sugar_branded") or nutrient("sugar"),
            sodium=nutrient("sodium"),
        ),
        brand=str(food.get("brandOwner") or ""),
        serving_size_g=float(serving) if isinstance(serving, int | float) else None,
        serving_size_label=str(food.get("servingSizeUnit") or "g"),
    )


def _off_record(product: dict[str, object], fallback_code: str) -> RemoteFoodRecord:
    nutriments = product.get("nutriments")
    n = nutriments if isinstance(nutriments, dict) else {}
    sodium_g = n.get("sodium_100g")
    serving = product.get("serving_quantity")
    if isinstance(serving, str):
        try:
            serving = float(serving)
        except ValueError:
            serving = None
    return RemoteFoodRecord(
        id=str(product.get("code") or fallback_code),
        name=str(product.get("product_name") or ""),
        provider=Provider.SECONDARY,
        per_100g=NutrientProfile(
            calories=_round1(n.get("energy-kcal_100g")),
            protein=_round1(n.get("proteins_100g")),
            carbs=_round1(n.get("carbohydrates_100g")),
            fat=_round1(n.get("fat_100g")),
            fiber=_round1(n.get("fiber_100g")),
            sugar=_round1(n.get("sugars_100g")),
            # grams to milligrams
            sodium=_round1(sodium_g * 1000)
            if isinstance(sodium_g, int | float)
            else 0.0,
        ),
        brand=str(product.get("brands") or ""),
        serving_size_g=float(serving)
        if isinstance(serving, int | float) and serving > 0
        else None,
        serving_size_label=str(product.get("serving_size") or ""),
    )
