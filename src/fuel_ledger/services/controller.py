"""Entry point the view layer uses to drive the ledger."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from fuel_ledger.domain.catalog import (
    CatalogGroup,
    CatalogSources,
    CustomFood,
    CustomMeal,
    DayPhase,
    PlanFood,
)
from fuel_ledger.domain.ledger import (
    LedgerSnapshot,
    LogDraft,
    MacroType,
    SourceCategory,
    SourceTotals,
)
from fuel_ledger.domain.remote import BarcodeLookup, RemoteFoodRecord
from fuel_ledger.services.catalog import (
    FoodCatalogResolver,
    custom_food_drafts,
    custom_meal_drafts,
    plan_food_drafts,
)
from fuel_ledger.services.ledger import LedgerStore
from fuel_ledger.services.persistence import DailyTrackingRepository, KeyValueRepository
from fuel_ledger.services.remote_search import RemoteFoodGateway, remote_food_drafts
from fuel_ledger.services.units import parse_amount, slices_to_grams
from fuel_ledger.services.user_foods import UserFoodsService

QUICK_ADD_NAME = "Quick add"

_logger = logging.getLogger(__name__)


def today_key() -> str:
    """Return today's local date key."""
    return datetime.now().astimezone().date().isoformat()


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class NutritionLedgerController:
    """Routes user intents for the selected day into its ledger."""

    tracking: DailyTrackingRepository
    store: KeyValueRepository
    user_foods: UserFoodsService
    gateway: RemoteFoodGateway
    resolver: FoodCatalogResolver = field(default_factory=FoodCatalogResolver)
    date_key: str = field(default_factory=today_key)
    clock: Callable[[], datetime] = _local_now
    _ledger: LedgerStore = field(init=False)

    def __post_init__(self) -> None:
        self._ledger = self._open(self.date_key)

    def select_day(self, day: date | str) -> LedgerSnapshot:
        """Switch the selected day and return its state."""
        key = day.isoformat() if isinstance(day, date) else day
        if key != self.date_key:
            self.date_key = key
            self._ledger = self._open(key)
        return self.snapshot()

    def snapshot(self) -> LedgerSnapshot:
        """Return the selected day's aggregate and history."""
        return LedgerSnapshot(
            date_key=self.date_key,
            aggregate=self._ledger.get_aggregate(),
            history=self._ledger.get_history(),
        )

    def catalog(
        self,
        query: str | None,
        plan_foods: list[PlanFood],
        phase: DayPhase | None = None,
    ) -> list[CatalogGroup]:
        """Return grouped local foods for the current phase and query."""
        sources = CatalogSources(
            plan_foods=plan_foods,
            custom_foods=self.user_foods.list_custom_foods(),
            custom_meals=self.user_foods.list_custom_meals(),
            phase=phase or DayPhase(),
        )
        return self.resolver.search(query, sources)

    def log_catalog_item(self, item: PlanFood | CustomFood | CustomMeal) -> LedgerSnapshot:
        """Log a tapped catalog row."""
        if isinstance(item, PlanFood):
            drafts = plan_food_drafts(item)
        elif isinstance(item, CustomFood):
            drafts = custom_food_drafts(item)
        else:
            drafts = custom_meal_drafts(item)
        return self._append_all(drafts)

    def log_remote_food(
        self, record: RemoteFoodRecord, serving_grams: object
    ) -> LedgerSnapshot:
        """Log a remote record scaled to the chosen serving."""
        grams = parse_amount(serving_grams)
        drafts = remote_food_drafts(record, grams)
        snapshot = self._append_all(drafts)
        if drafts:
            self.user_foods.add_recent_food(record, grams)
        return snapshot

    def quick_add(self, macro: MacroType, raw_amount: object) -> LedgerSnapshot:
        """Log a typed gram amount without a named food."""
        draft = LogDraft(
            macro_type=MacroType(macro),
            amount_g=parse_amount(raw_amount),
            name=QUICK_ADD_NAME,
            source_category=SourceCategory.CUSTOM_FOOD,
        )
        return self._append_all([draft])

    def quick_add_slices(self, macro: MacroType, raw_slices: object) -> LedgerSnapshot:
        """Log a whole number of slices at the nominal slice size."""
        macro = MacroType(macro)
        slices = parse_amount(raw_slices)
        draft = LogDraft(
            macro_type=macro,
            amount_g=slices_to_grams(macro, slices),
            name=f"{QUICK_ADD_NAME} ({slices} slices)",
            source_category=SourceCategory.CUSTOM_FOOD,
        )
        return self._append_all([draft])

    def update_search(self, query: str) -> None:
        """Forward a keystroke to the remote search session."""
        self.gateway.set_query(query)

    async def scan_barcode(self, code: str) -> BarcodeLookup:
        """Resolve a scanned barcode; logging happens on a later tap."""
        return await self.gateway.lookup_barcode(code)

    def manual_edit(self, macro: MacroType, raw_total: object) -> LedgerSnapshot:
        """Overwrite a macro total; clears the day's history."""
        self._ledger.manual_edit(macro, raw_total)
        return self.snapshot()

    def undo_last(self) -> LedgerSnapshot:
        """Undo the most recent entry."""
        self._ledger.undo_last()
        return self.snapshot()

    def delete_entry(self, entry_id: str) -> LedgerSnapshot:
        """Delete one entry by id."""
        if self._ledger.delete_entry(entry_id) is None:
            _logger.info("Entry %s not found on %s", entry_id, self.date_key)
        return self.snapshot()

    def reset_day(self) -> LedgerSnapshot:
        """Zero the selected day's macros."""
        self._ledger.reset_day()
        return self.snapshot()

    def summary_by_source(self) -> list[SourceTotals]:
        """Return the selected day's totals per source."""
        return self._ledger.summarize_by_source()

    def _append_all(self, drafts: list[LogDraft]) -> LedgerSnapshot:
        for draft in drafts:
            self._ledger.append(draft)
        return self.snapshot()

    def _open(self, date_key: str) -> LedgerStore:
        return LedgerStore(
            date_key=date_key,
            tracking=self.tracking,
            store=self.store,
            clock=self.clock,
        )
