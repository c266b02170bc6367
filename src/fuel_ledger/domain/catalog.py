"""Domain models for loggable foods."""

from dataclasses import dataclass, field
from enum import StrEnum

from fuel_ledger.domain.ledger import MacroType, SourceCategory

PLAN_CATEGORY_ORDER = (
    SourceCategory.PLAN_FRUCTOSE,
    SourceCategory.PLAN_GLUCOSE,
    SourceCategory.PLAN_ZERO_FIBER,
    SourceCategory.PLAN_PROTEIN,
)


@dataclass(frozen=True)
class PlanFood:
    """A food from the curated protocol plan."""

    name: str
    category: SourceCategory
    macro_type: MacroType
    grams: int
    serving: str = ""
    liquid_oz: int | None = None


@dataclass(frozen=True)
class CustomFood:
    """A user-defined food."""

    id: str
    name: str
    carbs_g: int
    protein_g: int
    serving_label: str = ""
    liquid_oz: int | None = None


@dataclass(frozen=True)
class MealItem:
    """One component of a custom meal."""

    name: str
    carbs_g: int
    protein_g: int
    liquid_oz: int | None = None


@dataclass(frozen=True)
class CustomMeal:
    """A user-defined multi-item meal with memoised totals."""

    id: str
    name: str
    items: list[MealItem]
    total_carbs: int
    total_protein: int
    total_water: int


@dataclass(frozen=True)
class DayPhase:
    """Protocol-engine verdict for the selected day."""

    recommended: frozenset[SourceCategory] = frozenset(PLAN_CATEGORY_ORDER)
    protein_allowed: bool = True


@dataclass
class CatalogSources:
    """Everything the catalog may show for a day."""

    plan_foods: list[PlanFood] = field(default_factory=list)
    custom_foods: list[CustomFood] = field(default_factory=list)
    custom_meals: list[CustomMeal] = field(default_factory=list)
    phase: DayPhase = field(default_factory=DayPhase)


class GroupKind(StrEnum):
    """Section a catalog group belongs to."""

    PLAN = "plan"
    CUSTOM_FOODS = "custom-foods"
    CUSTOM_MEALS = "custom-meals"


@dataclass(frozen=True)
class CatalogGroup:
    """A labelled section of catalog results."""

    kind: GroupKind
    label: str
    items: list[PlanFood] | list[CustomFood] | list[CustomMeal]
    category: SourceCategory | None = None
