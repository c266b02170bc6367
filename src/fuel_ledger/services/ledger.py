"""Per-day nutrition ledger."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from fuel_ledger.domain.ledger import (
    DailyAggregate,
    FoodLogEntry,
    LogDraft,
    MacroType,
    SourceCategory,
    SourceTotals,
)
from fuel_ledger.services.persistence import (
    DailyTrackingRepository,
    KeyValueRepository,
    food_history_key,
)
from fuel_ledger.services.serialization import entries_from_value, entry_to_dict
from fuel_ledger.services.units import grams_to_slices, parse_amount

_logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def new_entry_id(timestamp: datetime) -> str:
    """Return a unique, time-derived entry id."""
    return f"{int(timestamp.timestamp() * 1000)}-{secrets.token_hex(5)}"


@dataclass
class LedgerStore:
    """Owns one day's totals and the ordered history of log entries.

    Slice totals are always recomputed from the current gram total.
    Every mutation persists the aggregate and the history before returning.
    """

    date_key: str
    tracking: DailyTrackingRepository
    store: KeyValueRepository
    clock: Callable[[], datetime] = _local_now
    _aggregate: DailyAggregate = field(init=False)
    _history: list[FoodLogEntry] = field(init=False)

    def __post_init__(self) -> None:
        self._aggregate = self.tracking.get_aggregate(self.date_key)
        self._history = entries_from_value(
            self.store.get(food_history_key(self.date_key))
        )

    def get_aggregate(self) -> DailyAggregate:
        """Return the current totals."""
        return self._aggregate

    def get_history(self) -> list[FoodLogEntry]:
        """Return entries oldest first."""
        return list(self._history)

    def append(self, draft: LogDraft) -> FoodLogEntry | None:
        """Add an entry and its contribution to the totals.

        Returns None without touching state when the amount sanitises to zero.
        """
        amount = parse_amount(draft.amount_g)
        if amount <= 0:
            return None
        liquid = parse_amount(draft.liquid_oz) or None
        timestamp = self.clock()
        entry = FoodLogEntry(
            id=new_entry_id(timestamp),
            name=draft.name,
            macro_type=draft.macro_type,
            amount_g=amount,
            timestamp=timestamp,
            source_category=draft.source_category,
            liquid_oz=liquid,
        )
        aggregate = _with_grams(
            self._aggregate,
            draft.macro_type,
            self._aggregate.grams_for(draft.macro_type) + amount,
        )
        if liquid:
            aggregate = replace(
                aggregate, water_consumed_oz=aggregate.water_consumed_oz + liquid
            )
        self._aggregate = aggregate
        self._history.append(entry)
        self._persist()
        return entry

    def undo_last(self) -> FoodLogEntry | None:
        """Remove the most recent entry; no-op on an empty history."""
        if not self._history:
            return None
        entry = self._history.pop()
        self._subtract(entry)
        self._persist()
        return entry

    def delete_entry(self, entry_id: str) -> FoodLogEntry | None:
        """Remove an entry by id; no-op when the id is unknown."""
        for index, entry in enumerate(self._history):
            if entry.id == entry_id:
                del self._history[index]
                self._subtract(entry)
                self._persist()
                return entry
        return None

    def manual_edit(self, macro: MacroType, new_total: object) -> None:
        """Overwrite a macro total and clear the day's history."""
        macro = MacroType(macro)
        grams = parse_amount(new_total)
        self._aggregate = _with_grams(self._aggregate, macro, grams)
        if self._history:
            _logger.info(
                "Manual %s edit on %s cleared %s history entries",
                macro.value,
                self.date_key,
                len(self._history),
            )
        self._history = []
        self._persist()

    def reset_day(self) -> None:
        """Zero macro and slice totals and clear history; water is kept."""
        self._aggregate = replace(
            self._aggregate,
            carbs_consumed_g=0,
            protein_consumed_g=0,
            carb_slices=0,
            protein_slices=0,
        )
        self._history = []
        self._persist()

    def summarize_by_source(self) -> list[SourceTotals]:
        """Total the history per source category, in first-seen order."""
        buckets: dict[SourceCategory, dict[str, int]] = {}
        for entry in self._history:
            bucket = buckets.setdefault(
                entry.source_category,
                {"carbs": 0, "protein": 0, "water": 0, "entries": 0},
            )
            bucket[entry.macro_type.value] += entry.amount_g
            bucket["water"] += entry.liquid_oz or 0
            bucket["entries"] += 1
        return [
            SourceTotals(
                source_category=category,
                carbs_g=bucket["carbs"],
                protein_g=bucket["protein"],
                water_oz=bucket["water"],
                entries=bucket["entries"],
            )
            for category, bucket in buckets.items()
        ]

    def _subtract(self, entry: FoodLogEntry) -> None:
        aggregate = _with_grams(
            self._aggregate,
            entry.macro_type,
            max(0, self._aggregate.grams_for(entry.macro_type) - entry.amount_g),
        )
        if entry.liquid_oz:
            aggregate = replace(
                aggregate,
                water_consumed_oz=max(
                    0, aggregate.water_consumed_oz - entry.liquid_oz
                ),
            )
        self._aggregate = aggregate

    def _persist(self) -> None:
        self.tracking.save_aggregate(self.date_key, self._aggregate)
        self.store.set(
            food_history_key(self.date_key),
            [entry_to_dict(entry) for entry in self._history],
        )


def _with_grams(
    aggregate: DailyAggregate, macro: MacroType, grams: int
) -> DailyAggregate:
    grams = max(0, grams)
    if macro == MacroType.CARBS:
        return replace(
            aggregate,
            carbs_consumed_g=grams,
            carb_slices=grams_to_slices(macro, grams),
        )
    return replace(
        aggregate,
        protein_consumed_g=grams,
        protein_slices=grams_to_slices(macro, grams),
    )
