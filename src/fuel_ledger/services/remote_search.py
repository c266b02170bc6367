"""Debounced remote food search with per-provider failure isolation."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from fuel_ledger.adapters.food_api_client import FoodApiClient
from fuel_ledger.domain.ledger import LogDraft, MacroType, SourceCategory
from fuel_ledger.domain.remote import (
    BarcodeLookup,
    BarcodeStatus,
    NutrientProfile,
    Provider,
    ProviderPhase,
    ProviderState,
    RemoteFoodRecord,
    SearchPhase,
)
from fuel_ledger.services.food_search import status_code_from_exception
from fuel_ledger.services.serialization import remote_food_from_dict
from fuel_ledger.services.units import round_half_up

MIN_BARCODE_LENGTH = 4
DEFAULT_SERVING_G = 100

PROVIDER_CATEGORIES = {
    Provider.PRIMARY: SourceCategory.REMOTE_DB_A,
    Provider.SECONDARY: SourceCategory.REMOTE_DB_B,
}

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Per-provider search policy."""

    provider: Provider
    report_errors: bool = False


DEFAULT_PROVIDERS = (
    ProviderConfig(Provider.PRIMARY, report_errors=True),
    ProviderConfig(Provider.SECONDARY, report_errors=False),
)


@dataclass
class RemoteFoodGateway:
    """Search session over the remote providers.

    Each keystroke bumps the generation counter. A response is applied only
    when its generation is still current, so a slow response from an older
    query can never overwrite a newer one.
    """

    client: FoodApiClient
    providers: tuple[ProviderConfig, ...] = DEFAULT_PROVIDERS
    debounce_seconds: float = 0.5
    min_query_length: int = 3
    on_error: Callable[[Provider, Exception], None] | None = None
    query: str = field(default="", init=False)
    phase: SearchPhase = field(default=SearchPhase.IDLE, init=False)
    states: dict[Provider, ProviderState] = field(init=False)
    _generation: int = field(default=0, init=False)
    _notified_generation: int = field(default=-1, init=False)
    _timer: asyncio.TimerHandle | None = field(default=None, init=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _closed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.states = {config.provider: ProviderState() for config in self.providers}

    def state_for(self, provider: Provider) -> ProviderState:
        """Return the current state of one provider."""
        return self.states[provider]

    def set_query(self, query: str) -> None:
        """Record a keystroke and restart the debounce window.

        Must be called from inside the running event loop.
        """
        self._cancel_timer()
        self._generation += 1
        self.query = query
        trimmed = query.strip()
        if self._closed:
            return
        if len(trimmed) < self.min_query_length:
            self._reset_states()
            self.phase = SearchPhase.IDLE
            return
        self.phase = SearchPhase.DEBOUNCING
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.debounce_seconds, self._fire, self._generation, trimmed
        )

    def clear(self) -> None:
        """Drop the query and every provider's results."""
        self._cancel_timer()
        self._generation += 1
        self.query = ""
        self._reset_states()
        self.phase = SearchPhase.IDLE

    def close(self) -> None:
        """End the session; pending timers and late responses become no-ops."""
        self._cancel_timer()
        self._generation += 1
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    async def wait_until_settled(self) -> None:
        """Wait for every in-flight search cycle to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def lookup_barcode(self, code: str) -> BarcodeLookup:
        """Resolve a scanned barcode immediately, without debounce."""
        trimmed = code.strip()
        if len(trimmed) < MIN_BARCODE_LENGTH:
            return BarcodeLookup(status=BarcodeStatus.NOT_FOUND)
        try:
            payload = await self.client.lookup_barcode(trimmed)
        except Exception as exc:
            _logger.warning(
                "Barcode lookup failed (code=%s, status=%s): %s",
                trimmed,
                status_code_from_exception(exc),
                exc,
            )
            return BarcodeLookup(status=BarcodeStatus.FAILED)
        if not isinstance(payload, dict):
            _logger.warning(
                "Barcode lookup returned %s instead of an object (code=%s)",
                type(payload).__name__,
                trimmed,
            )
            return BarcodeLookup(status=BarcodeStatus.FAILED)

        food = payload.get("food")
        if not payload.get("found") or not isinstance(food, dict):
            return BarcodeLookup(status=BarcodeStatus.NOT_FOUND)
        record = remote_food_from_dict(food, Provider.SECONDARY)
        self.clear()
        if Provider.SECONDARY in self.states:
            self.states[Provider.SECONDARY] = ProviderState(
                results=[record], searched=True, phase=ProviderPhase.LOADED
            )
            self.phase = SearchPhase.SETTLED
        return BarcodeLookup(status=BarcodeStatus.FOUND, food=record)

    def _fire(self, generation: int, query: str) -> None:
        self._timer = None
        if self._closed or generation != self._generation:
            return
        task = asyncio.get_running_loop().create_task(
            self._run_cycle(generation, query)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_cycle(self, generation: int, query: str) -> None:
        self.phase = SearchPhase.FETCHING
        for config in self.providers:
            state = self.states[config.provider]
            state.loading = True
            state.searched = True
            state.phase = ProviderPhase.LOADING
        await asyncio.gather(
            *(self._fetch(generation, config, query) for config in self.providers)
        )
        if generation == self._generation:
            self.phase = SearchPhase.SETTLED

    async def _fetch(self, generation: int, config: ProviderConfig, query: str) -> None:
        try:
            payload = await self.client.search_foods(config.provider, query)
            records = [
                remote_food_from_dict(row, config.provider)
                for row in payload.get("foods") or []
                if isinstance(row, dict)
            ]
        except Exception as exc:
            if generation != self._generation:
                _logger.debug("Discarding stale %s failure", config.provider.value)
                return
            _logger.warning(
                "Food search %s failed (query=%s, status=%s): %s",
                config.provider.value,
                query,
                status_code_from_exception(exc),
                exc,
            )
            self.states[config.provider] = ProviderState(
                searched=True, phase=ProviderPhase.FAILED
            )
            self._notify(generation, config, exc)
            return

        if generation != self._generation:
            _logger.debug(
                "Discarding stale %s results for %r", config.provider.value, query
            )
            return
        self.states[config.provider] = ProviderState(
            results=records, searched=True, phase=ProviderPhase.LOADED
        )

    def _notify(self, generation: int, config: ProviderConfig, exc: Exception) -> None:
        if not config.report_errors or self.on_error is None:
            return
        if self._notified_generation == generation:
            return
        self._notified_generation = generation
        self.on_error(config.provider, exc)

    def _reset_states(self) -> None:
        self.states = {config.provider: ProviderState() for config in self.providers}

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


def default_serving_grams(record: RemoteFoodRecord) -> int:
    """Return the provider's serving hint in grams, or 100."""
    if record.serving_size_g and record.serving_size_g > 0:
        return max(1, round_half_up(record.serving_size_g))
    return DEFAULT_SERVING_G


def scale_record(record: RemoteFoodRecord, grams: int) -> NutrientProfile:
    """Scale a per-100g record to a serving of grams."""
    return record.per_100g.scaled(grams / 100)


def remote_food_drafts(record: RemoteFoodRecord, grams: int) -> list[LogDraft]:
    """Return ledger drafts for a remote record logged at grams."""
    if grams <= 0:
        return []
    scaled = scale_record(record, grams)
    label = f"{record.name} - {record.brand}" if record.brand else record.name
    name = f"{label} ({grams}g)"
    category = PROVIDER_CATEGORIES[record.provider]
    drafts: list[LogDraft] = []
    for macro, amount in (
        (MacroType.CARBS, round_half_up(scaled.carbs)),
        (MacroType.PROTEIN, round_half_up(scaled.protein)),
    ):
        if amount <= 0:
            continue
        drafts.append(
            LogDraft(
                macro_type=macro,
                amount_g=amount,
                name=name,
                source_category=category,
            )
        )
    return drafts
