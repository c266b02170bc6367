"""Services for the user's own foods, meals, recents and favorites."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from uuid import uuid4

from fuel_ledger.domain.catalog import CustomFood, CustomMeal, MealItem
from fuel_ledger.domain.remote import RecentFood, RemoteFoodRecord
from fuel_ledger.services.persistence import (
    CUSTOM_FOODS_KEY,
    CUSTOM_MEALS_KEY,
    FAVORITES_KEY,
    RECENT_FOODS_KEY,
    KeyValueRepository,
)
from fuel_ledger.services.serialization import (
    custom_food_from_dict,
    custom_food_to_dict,
    custom_meal_from_dict,
    custom_meal_to_dict,
    recent_from_dict,
    recent_to_dict,
)
from fuel_ledger.services.units import parse_amount


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class UserFoodsService:
    """Application service for user-defined and remembered foods."""

    store: KeyValueRepository
    recent_limit: int = 15
    clock_ms: Callable[[], int] = _now_ms

    def list_custom_foods(self) -> list[CustomFood]:
        """Return custom foods in creation order."""
        return [
            custom_food_from_dict(row)
            for row in _rows(self.store.get(CUSTOM_FOODS_KEY))
            if "id" in row
        ]

    def create_custom_food(  # noqa: PLR0913
        self,
        name: str,
        carbs: object,
        protein: object,
        serving_label: str = "",
        liquid_oz: object = None,
    ) -> CustomFood:
        """Create and persist a custom food."""
        food = CustomFood(
            id=str(uuid4()),
            name=name.strip(),
            carbs_g=parse_amount(carbs),
            protein_g=parse_amount(protein),
            serving_label=serving_label.strip(),
            liquid_oz=parse_amount(liquid_oz) or None,
        )
        foods = [*self.list_custom_foods(), food]
        self.store.set(CUSTOM_FOODS_KEY, [custom_food_to_dict(item) for item in foods])
        return food

    def delete_custom_food(self, food_id: str) -> bool:
        """Delete a custom food; return False when it does not exist."""
        foods = self.list_custom_foods()
        remaining = [food for food in foods if food.id != food_id]
        if len(remaining) == len(foods):
            return False
        self.store.set(
            CUSTOM_FOODS_KEY, [custom_food_to_dict(item) for item in remaining]
        )
        return True

    def list_custom_meals(self) -> list[CustomMeal]:
        """Return custom meals in creation order."""
        return [
            custom_meal_from_dict(row)
            for row in _rows(self.store.get(CUSTOM_MEALS_KEY))
            if "id" in row
        ]

    def create_custom_meal(self, name: str, items: list[MealItem]) -> CustomMeal:
        """Create and persist a meal, memoising its totals."""
        meal = CustomMeal(
            id=str(uuid4()),
            name=name.strip(),
            items=list(items),
            total_carbs=sum(item.carbs_g for item in items),
            total_protein=sum(item.protein_g for item in items),
            total_water=sum(item.liquid_oz or 0 for item in items),
        )
        meals = [*self.list_custom_meals(), meal]
        self.store.set(CUSTOM_MEALS_KEY, [custom_meal_to_dict(item) for item in meals])
        return meal

    def delete_custom_meal(self, meal_id: str) -> bool:
        """Delete a custom meal; return False when it does not exist."""
        meals = self.list_custom_meals()
        remaining = [meal for meal in meals if meal.id != meal_id]
        if len(remaining) == len(meals):
            return False
        self.store.set(
            CUSTOM_MEALS_KEY, [custom_meal_to_dict(item) for item in remaining]
        )
        return True

    def list_recent_foods(self) -> list[RecentFood]:
        """Return recently logged remote foods, most recent first."""
        recents: list[RecentFood] = []
        for row in _rows(self.store.get(RECENT_FOODS_KEY)):
            try:
                recents.append(recent_from_dict(row))
            except ValueError:
                continue
        return recents

    def add_recent_food(self, food: RemoteFoodRecord, serving_g: int) -> None:
        """Move a food to the front of the recents list."""
        recents = [
            recent
            for recent in self.list_recent_foods()
            if (recent.food.provider, recent.food.id) != (food.provider, food.id)
        ]
        recents.insert(
            0, RecentFood(food=food, serving_g=serving_g, last_used_ms=self.clock_ms())
        )
        self.store.set(
            RECENT_FOODS_KEY,
            [recent_to_dict(recent) for recent in recents[: self.recent_limit]],
        )

    def favorite_names(self) -> list[str]:
        """Return favorite food names in the order they were added."""
        raw = self.store.get(FAVORITES_KEY)
        if not isinstance(raw, list):
            return []
        return [str(name) for name in raw]

    def is_favorite(self, name: str) -> bool:
        """Return True when name is a favorite."""
        return name in self.favorite_names()

    def toggle_favorite(self, name: str) -> bool:
        """Flip a food's favorite flag and return the new state."""
        names = self.favorite_names()
        if name in names:
            names.remove(name)
            now_favorite = False
        else:
            names.append(name)
            now_favorite = True
        self.store.set(FAVORITES_KEY, names)
        return now_favorite


def _rows(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]
