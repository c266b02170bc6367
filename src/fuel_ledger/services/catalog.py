"""Catalog search across plan, custom food and custom meal sources."""

from dataclasses import dataclass

from fuel_ledger.domain.catalog import (
    PLAN_CATEGORY_ORDER,
    CatalogGroup,
    CatalogSources,
    CustomFood,
    CustomMeal,
    GroupKind,
    PlanFood,
)
from fuel_ledger.domain.ledger import LogDraft, MacroType, SourceCategory

PLAN_LABELS = {
    SourceCategory.PLAN_FRUCTOSE: "Fructose",
    SourceCategory.PLAN_GLUCOSE: "Glucose / Starch",
    SourceCategory.PLAN_ZERO_FIBER: "Zero Fiber",
    SourceCategory.PLAN_PROTEIN: "Protein",
}


@dataclass
class FoodCatalogResolver:
    """Merges local food sources into labelled, ordered groups."""

    custom_foods_label: str = "Custom Foods"
    custom_meals_label: str = "Custom Meals"

    def search(
        self, query: str | None, sources: CatalogSources
    ) -> list[CatalogGroup]:
        """Return plan groups, then custom foods, then custom meals.

        Without a query only the phase-recommended plan groups are returned;
        with one, every plan group is searched. Empty groups are dropped.
        """
        needle = (query or "").strip().lower()
        phase = sources.phase
        categories = [
            category
            for category in PLAN_CATEGORY_ORDER
            if (needle or category in phase.recommended)
            and (phase.protein_allowed or category != SourceCategory.PLAN_PROTEIN)
        ]

        groups: list[CatalogGroup] = []
        for category in categories:
            foods = [
                food
                for food in sources.plan_foods
                if food.category == category and _matches(food.name, needle)
            ]
            if foods:
                groups.append(
                    CatalogGroup(
                        kind=GroupKind.PLAN,
                        label=PLAN_LABELS[category],
                        items=foods,
                        category=category,
                    )
                )

        custom_foods = [
            food for food in sources.custom_foods if _matches(food.name, needle)
        ]
        if custom_foods:
            groups.append(
                CatalogGroup(
                    kind=GroupKind.CUSTOM_FOODS,
                    label=self.custom_foods_label,
                    items=custom_foods,
                    category=SourceCategory.CUSTOM_FOOD,
                )
            )
        custom_meals = [
            meal for meal in sources.custom_meals if _matches(meal.name, needle)
        ]
        if custom_meals:
            groups.append(
                CatalogGroup(
                    kind=GroupKind.CUSTOM_MEALS,
                    label=self.custom_meals_label,
                    items=custom_meals,
                    category=SourceCategory.CUSTOM_MEAL,
                )
            )
        return groups


def _matches(name: str, needle: str) -> bool:
    return not needle or needle in name.lower()


def plan_food_drafts(food: PlanFood) -> list[LogDraft]:
    """Return the ledger drafts for a plan food tap."""
    if food.grams <= 0:
        return []
    return [
        LogDraft(
            macro_type=food.macro_type,
            amount_g=food.grams,
            name=food.name,
            source_category=food.category,
            liquid_oz=food.liquid_oz,
        )
    ]


def custom_food_drafts(food: CustomFood) -> list[LogDraft]:
    """Return one draft per non-zero macro of a custom food."""
    label = f"{food.name} ({food.serving_label})" if food.serving_label else food.name
    return _macro_drafts(
        label,
        food.carbs_g,
        food.protein_g,
        food.liquid_oz,
        SourceCategory.CUSTOM_FOOD,
    )


def custom_meal_drafts(meal: CustomMeal) -> list[LogDraft]:
    """Return one draft per non-zero macro per item of a meal."""
    drafts: list[LogDraft] = []
    for item in meal.items:
        drafts.extend(
            _macro_drafts(
                f"{meal.name}: {item.name}",
                item.carbs_g,
                item.protein_g,
                item.liquid_oz,
                SourceCategory.CUSTOM_MEAL,
            )
        )
    return drafts


def _macro_drafts(
    name: str,
    carbs_g: int,
    protein_g: int,
    liquid_oz: int | None,
    category: SourceCategory,
) -> list[LogDraft]:
    drafts: list[LogDraft] = []
    for macro, grams in ((MacroType.CARBS, carbs_g), (MacroType.PROTEIN, protein_g)):
        if grams <= 0:
            continue
        drafts.append(
            LogDraft(
                macro_type=macro,
                amount_g=grams,
                name=name,
                source_category=category,
                # liquid is counted once, on the first entry of the item
                liquid_oz=liquid_oz if not drafts else None,
            )
        )
    return drafts
