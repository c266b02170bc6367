"""Domain models for the daily nutrition ledger."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class MacroType(StrEnum):
    """Macronutrient a ledger entry counts toward."""

    CARBS = "carbs"
    PROTEIN = "protein"


class SourceCategory(StrEnum):
    """Where a logged food came from."""

    PLAN_FRUCTOSE = "plan-fructose"
    PLAN_GLUCOSE = "plan-glucose"
    PLAN_ZERO_FIBER = "plan-zero-fiber"
    PLAN_PROTEIN = "plan-protein"
    CUSTOM_FOOD = "custom-food"
    CUSTOM_MEAL = "custom-meal"
    REMOTE_DB_A = "remote-db-a"
    REMOTE_DB_B = "remote-db-b"


@dataclass(frozen=True)
class DailyAggregate:
    """Running totals for one calendar day."""

    carbs_consumed_g: int = 0
    protein_consumed_g: int = 0
    water_consumed_oz: int = 0
    carb_slices: int = 0
    protein_slices: int = 0

    def grams_for(self, macro: MacroType) -> int:
        """Return the gram total for a macro."""
        if macro == MacroType.CARBS:
            return self.carbs_consumed_g
        return self.protein_consumed_g

    def slices_for(self, macro: MacroType) -> int:
        """Return the slice total for a macro."""
        if macro == MacroType.CARBS:
            return self.carb_slices
        return self.protein_slices


@dataclass(frozen=True)
class LogDraft:
    """A food about to be appended to the ledger."""

    macro_type: MacroType
    amount_g: int
    name: str
    source_category: SourceCategory
    liquid_oz: int | None = None


@dataclass(frozen=True)
class FoodLogEntry:
    """Immutable ledger row."""

    id: str
    name: str
    macro_type: MacroType
    amount_g: int
    timestamp: datetime
    source_category: SourceCategory
    liquid_oz: int | None = None


@dataclass(frozen=True)
class SourceTotals:
    """Per-source totals derived from a day's history."""

    source_category: SourceCategory
    carbs_g: int
    protein_g: int
    water_oz: int
    entries: int


@dataclass(frozen=True)
class LedgerSnapshot:
    """Aggregate plus history handed back to the view layer."""

    date_key: str
    aggregate: DailyAggregate
    history: list[FoodLogEntry]
