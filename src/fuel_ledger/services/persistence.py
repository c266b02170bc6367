"""Key-value persistence ports and local implementations."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Protocol

from fuel_ledger.domain.ledger import DailyAggregate
from fuel_ledger.services.serialization import aggregate_from_dict, aggregate_to_dict

CUSTOM_FOODS_KEY = "custom-foods"
CUSTOM_MEALS_KEY = "custom-meals"
RECENT_FOODS_KEY = "recent-foods"
FAVORITES_KEY = "favorites"

_logger = logging.getLogger(__name__)


def food_history_key(date_key: str) -> str:
    """Return the history key for a day."""
    return f"food-history:{date_key}"


def daily_tracking_key(date_key: str) -> str:
    """Return the daily tracking key for a day."""
    return f"daily-tracking:{date_key}"


class PersistenceError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueRepository(Protocol):
    """Persistence interface for JSON-compatible values."""

    def get(self, key: str) -> object | None:
        """Return the stored value for key, if any."""

    def set(self, key: str, value: object) -> None:
        """Store value under key, replacing any previous value."""


class DailyTrackingRepository(Protocol):
    """Persistence interface for per-day aggregates."""

    def get_aggregate(self, date_key: str) -> DailyAggregate:
        """Return the aggregate for a day, zeroed when absent."""

    def save_aggregate(self, date_key: str, aggregate: DailyAggregate) -> None:
        """Persist the aggregate for a day."""


@dataclass
class InMemoryKeyValueRepository(KeyValueRepository):
    """Process-local key-value store."""

    values: dict[str, object] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return a copy of the stored value."""
        value = self.values.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: object) -> None:
        """Store a copy of the value."""
        self.values[key] = copy.deepcopy(value)


@dataclass
class FallbackKeyValueRepository(KeyValueRepository):
    """Repository that degrades to memory after the first store failure."""

    primary: KeyValueRepository
    fallback: InMemoryKeyValueRepository = field(
        default_factory=InMemoryKeyValueRepository
    )
    degraded: bool = False

    def get(self, key: str) -> object | None:
        """Read from the primary store until it fails."""
        if self.degraded:
            return self.fallback.get(key)
        try:
            return self.primary.get(key)
        except Exception as exc:
            self._degrade("read", key, exc)
            return self.fallback.get(key)

    def set(self, key: str, value: object) -> None:
        """Write to the primary store until it fails."""
        if self.degraded:
            self.fallback.set(key, value)
            return
        try:
            self.primary.set(key, value)
        except Exception as exc:
            self._degrade("write", key, exc)
            self.fallback.set(key, value)

    def _degrade(self, action: str, key: str, exc: Exception) -> None:
        self.degraded = True
        _logger.warning(
            "Persistence %s failed for %s, continuing in memory: %s",
            action,
            key,
            exc,
        )


@dataclass
class KeyValueDailyTrackingRepository(DailyTrackingRepository):
    """Daily aggregates stored alongside the ledger in a key-value store."""

    store: KeyValueRepository

    def get_aggregate(self, date_key: str) -> DailyAggregate:
        """Return the stored aggregate or a zeroed one."""
        raw = self.store.get(daily_tracking_key(date_key))
        if not isinstance(raw, dict):
            return DailyAggregate()
        return aggregate_from_dict(raw)

    def save_aggregate(self, date_key: str, aggregate: DailyAggregate) -> None:
        """Persist the aggregate."""
        self.store.set(daily_tracking_key(date_key), aggregate_to_dict(aggregate))
