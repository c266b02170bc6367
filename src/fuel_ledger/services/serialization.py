"""Conversions between domain models and stored JSON values."""

import logging
from datetime import datetime

from fuel_ledger.domain.catalog import CustomFood, CustomMeal, MealItem
from fuel_ledger.domain.ledger import (
    DailyAggregate,
    FoodLogEntry,
    MacroType,
    SourceCategory,
)
from fuel_ledger.domain.remote import (
    NutrientProfile,
    Provider,
    RecentFood,
    RemoteFoodRecord,
)

_logger = logging.getLogger(__name__)


def entry_to_dict(entry: FoodLogEntry) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": entry.id,
        "name": entry.name,
        "macroType": entry.macro_type.value,
        "amount": entry.amount_g,
        "timestamp": entry.timestamp.isoformat(),
        "category": entry.source_category.value,
    }
    if entry.liquid_oz:
        payload["liquidOz"] = entry.liquid_oz
    return payload


def entry_from_dict(row: dict[str, object]) -> FoodLogEntry:
    liquid = row.get("liquidOz")
    return FoodLogEntry(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        macro_type=MacroType(row["macroType"]),
        amount_g=int(row.get("amount", 0)),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
        source_category=SourceCategory(row["category"]),
        liquid_oz=int(liquid) if isinstance(liquid, int | float) and liquid > 0 else None,
    )


def entries_from_value(value: object) -> list[FoodLogEntry]:
    """Parse a stored history list, skipping malformed rows."""
    if not isinstance(value, list):
        return []
    entries: list[FoodLogEntry] = []
    for row in value:
        if not isinstance(row, dict):
            continue
        try:
            entries.append(entry_from_dict(row))
        except (KeyError, TypeError, ValueError) as exc:
            _logger.warning("Skipping malformed history row %s: %s", row.get("id"), exc)
    return entries


def aggregate_to_dict(aggregate: DailyAggregate) -> dict[str, int]:
    return {
        "carbsConsumed": aggregate.carbs_consumed_g,
        "proteinConsumed": aggregate.protein_consumed_g,
        "waterConsumed": aggregate.water_consumed_oz,
        "carbSlices": aggregate.carb_slices,
        "proteinSlices": aggregate.protein_slices,
    }


def aggregate_from_dict(row: dict[str, object]) -> DailyAggregate:
    return DailyAggregate(
        carbs_consumed_g=_non_negative_int(row.get("carbsConsumed")),
        protein_consumed_g=_non_negative_int(row.get("proteinConsumed")),
        water_consumed_oz=_non_negative_int(row.get("waterConsumed")),
        carb_slices=_non_negative_int(row.get("carbSlices")),
        protein_slices=_non_negative_int(row.get("proteinSlices")),
    )


def custom_food_to_dict(food: CustomFood) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": food.id,
        "name": food.name,
        "carbs": food.carbs_g,
        "protein": food.protein_g,
        "servingLabel": food.serving_label,
    }
    if food.liquid_oz:
        payload["liquidOz"] = food.liquid_oz
    return payload


def custom_food_from_dict(row: dict[str, object]) -> CustomFood:
    return CustomFood(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        carbs_g=_non_negative_int(row.get("carbs")),
        protein_g=_non_negative_int(row.get("protein")),
        serving_label=str(row.get("servingLabel", "")),
        liquid_oz=_non_negative_int(row.get("liquidOz")) or None,
    )


def custom_meal_to_dict(meal: CustomMeal) -> dict[str, object]:
    items = []
    for item in meal.items:
        payload: dict[str, object] = {
            "name": item.name,
            "carbs": item.carbs_g,
            "protein": item.protein_g,
        }
        if item.liquid_oz:
            payload["liquidOz"] = item.liquid_oz
        items.append(payload)
    return {
        "id": meal.id,
        "name": meal.name,
        "items": items,
        "totalCarbs": meal.total_carbs,
        "totalProtein": meal.total_protein,
        "totalWater": meal.total_water,
    }


def custom_meal_from_dict(row: dict[str, object]) -> CustomMeal:
    raw_items = row.get("items")
    items = [
        MealItem(
            name=str(item.get("name", "")),
            carbs_g=_non_negative_int(item.get("carbs")),
            protein_g=_non_negative_int(item.get("protein")),
            liquid_oz=_non_negative_int(item.get("liquidOz")) or None,
        )
        for item in (raw_items if isinstance(raw_items, list) else [])
        if isinstance(item, dict)
    ]
    return CustomMeal(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        items=items,
        total_carbs=_non_negative_int(row.get("totalCarbs")),
        total_protein=_non_negative_int(row.get("totalProtein")),
        total_water=_non_negative_int(row.get("totalWater")),
    )


def remote_food_to_dict(food: RemoteFoodRecord) -> dict[str, object]:
    """Serialise a remote record in the food endpoints' wire format."""
    nutrients = food.per_100g
    return {
        "id": food.id,
        "name": food.name,
        "brand": food.brand,
        "provider": food.provider.value,
        "calories": nutrients.calories,
        "protein": nutrients.protein,
        "carbs": nutrients.carbs,
        "fat": nutrients.fat,
        "fiber": nutrients.fiber,
        "sugar": nutrients.sugar,
        "sodium": nutrients.sodium,
        "servingSize": food.serving_size_g,
        "servingSizeLabel": food.serving_size_label,
    }


def remote_food_from_dict(
    row: dict[str, object], provider: Provider | None = None
) -> RemoteFoodRecord:
    """Parse a remote record from the food endpoints' wire format."""
    serving = row.get("servingSize")
    resolved_provider = provider or Provider(row.get("provider", Provider.PRIMARY))
    return RemoteFoodRecord(
        id=str(row.get("id") or row.get("fdcId") or row.get("barcode") or ""),
        name=str(row.get("name", "")),
        provider=resolved_provider,
        per_100g=NutrientProfile(
            calories=_to_float(row.get("calories")),
            protein=_to_float(row.get("protein")),
            carbs=_to_float(row.get("carbs")),
            fat=_to_float(row.get("fat")),
            fiber=_to_float(row.get("fiber")),
            sugar=_to_float(row.get("sugar")),
            sodium=_to_float(row.get("sodium")),
        ),
        brand=str(row.get("brand") or ""),
        serving_size_g=(
            float(serving)
            if isinstance(serving, int | float) and not isinstance(serving, bool)
            else None
        ),
        serving_size_label=str(row.get("servingSizeLabel") or ""),
    )


def recent_to_dict(recent: RecentFood) -> dict[str, object]:
    return {
        "food": remote_food_to_dict(recent.food),
        "servingGrams": recent.serving_g,
        "lastUsed": recent.last_used_ms,
    }


def recent_from_dict(row: dict[str, object]) -> RecentFood:
    food = row.get("food")
    if not isinstance(food, dict):
        raise ValueError("recent food row has no food")
    return RecentFood(
        food=remote_food_from_dict(food),
        serving_g=_non_negative_int(row.get("servingGrams")),
        last_used_ms=_non_negative_int(row.get("lastUsed")),
    )


def _non_negative_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return max(0, int(value))
    return 0


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
