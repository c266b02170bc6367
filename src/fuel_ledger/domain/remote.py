"""Domain models for remote nutrition lookups."""

from dataclasses import dataclass, field
from enum import StrEnum


class Provider(StrEnum):
    """Remote nutrition provider identity."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrients for a fixed amount of food."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return every nutrient multiplied by factor."""
        return NutrientProfile(
            calories=self.calories * factor,
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
            fiber=self.fiber * factor,
            sugar=self.sugar * factor,
            sodium=self.sodium * factor,
        )


@dataclass(frozen=True)
class RemoteFoodRecord:
    """Per-100g nutrition returned by a remote provider."""

    id: str
    name: str
    provider: Provider
    per_100g: NutrientProfile
    brand: str = ""
    serving_size_g: float | None = None
    serving_size_label: str = ""


class BarcodeStatus(StrEnum):
    """Outcome of a barcode lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class BarcodeLookup:
    """Result of a barcode lookup."""

    status: BarcodeStatus
    food: RemoteFoodRecord | None = None


class SearchPhase(StrEnum):
    """Lifecycle of a remote search session."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    SETTLED = "settled"


class ProviderPhase(StrEnum):
    """Per-provider sub-state inside a search cycle."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class ProviderState:
    """Results and flags for one provider."""

    results: list[RemoteFoodRecord] = field(default_factory=list)
    loading: bool = False
    searched: bool = False
    phase: ProviderPhase = ProviderPhase.IDLE

    @property
    def failed(self) -> bool:
        """Return True when the last cycle failed for this provider."""
        return self.phase is ProviderPhase.FAILED


@dataclass(frozen=True)
class RecentFood:
    """A remote food the user logged recently."""

    food: RemoteFoodRecord
    serving_g: int
    last_used_ms: int
