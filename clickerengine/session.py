from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Coroutine

from clickerengine._types import Clock, WallClock, utc_now
from clickerengine.accrual import apply_click, apply_tick, purchase_upgrade, spend
from clickerengine.autosave import AutosaveScheduler
from clickerengine.boost import ActiveBoostSet, Boost, active
from clickerengine.cache import LocalCache
from clickerengine.catalog import UpgradeCatalog
from clickerengine.config import EngineConfig
from clickerengine.errors import (
    InsufficientFunds,
    PersistenceReadFailure,
    PersistenceWriteFailure,
)
from clickerengine.persistence import PersistenceBackend, PlayerRecord
from clickerengine.pipeline import DerivedRates, base_rates, effective_rates
from clickerengine.reconcile import (
    Reconciliation,
    ReconciliationRecord,
    consume_cache,
    reconcile,
)
from clickerengine.shop import FreeOffer, PlayerProfile, ShopItem, apply_effect, can_buy
from clickerengine.state import PlayerEconomyState

logger = logging.getLogger(__name__)

# Refusal reason while the server copy of the player is unknown.
NOT_LOADED = "Player not loaded"


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of a purchase attempt."""

    success: bool
    item_id: str
    cost: float = 0.0
    new_count: int = 0
    reason: str = ""


class GameSession:
    """One player's live game: state, boosts and the timers that move them.

    All callbacks run on a single asyncio loop, so state is replaced without
    locking. Remote writes are fire-and-forget; clicks and ticks never wait
    on the network.
    """

    def __init__(
        self,
        player_id: str,
        catalog: UpgradeCatalog,
        backend: PersistenceBackend,
        cache: LocalCache,
        config: EngineConfig | None = None,
        clock: Clock = time.monotonic,
        wall_clock: WallClock = utc_now,
    ) -> None:
        config = config or EngineConfig()
        errors = config.validate() + catalog.validate()
        if errors:
            raise ValueError(
                "Invalid session setup:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.player_id = player_id
        self.catalog = catalog
        self.backend = backend
        self.cache = cache
        self.config = config
        self._clock = clock
        self._wall_clock = wall_clock

        self.state = PlayerEconomyState()
        self.profile = PlayerProfile()
        self.record: PlayerRecord | None = None
        self.boosts: list[Boost] = []
        self.loaded = False
        self.degraded = False

        self.autosave = AutosaveScheduler(
            player_id=player_id,
            backend=backend,
            cache=cache,
            snapshot=self.snapshot,
            cache_key=config.cache_key(player_id),
            interval=config.autosave_interval,
        )
        self._last_tick: float | None = None
        self._rates_changed = asyncio.Event()
        self._timers: list[asyncio.Task] = []
        self._background: set[asyncio.Task] = set()

    # ── Lifecycle ────────────────────────────────────────────────────

    async def load(self) -> Reconciliation | None:
        """Fetch the player and merge any snapshot left by the last session.

        Returns None when the backend could not be read; the session then
        stays on its in-memory state, marked degraded, and the local
        snapshot is left in place for a later attempt.
        """
        try:
            record = await self.backend.fetch_player(self.player_id)
        except PersistenceReadFailure as exc:
            self.degraded = True
            logger.warning("Could not load player %r, keeping local state: %s", self.player_id, exc)
            return None

        if record is None:
            logger.warning("Player %r not found; starting from an empty state", self.player_id)
            record = PlayerRecord(id=self.player_id)

        cached = consume_cache(self.cache, self.config.cache_key(self.player_id))
        if not self.loaded and self.state.balance > 0:
            # Clicks made while the backend was unreachable count as a local snapshot too.
            if cached is None or self.state.balance > cached.balance:
                cached = ReconciliationRecord.capture(self.state, self.rates())
        result = reconcile(record.to_state(), cached)

        self.record = record
        self.state = result.state
        self.profile = PlayerProfile(is_vip=record.is_vip, membership=record.membership)
        self.loaded = True
        self.degraded = False
        self._last_tick = self._clock()

        if result.must_persist:
            logger.info(
                "Server balance for %r was stale (%.0f < %.0f); pushing correction",
                self.player_id, record.cookies, result.state.balance,
            )
            self._fire(self.backend.update_player(self.player_id, {"cookies": result.state.balance}))
        return result

    async def refresh_boosts(self) -> bool:
        """Replace the boost list from the backend. Returns False on failure."""
        try:
            boosts = await self.backend.list_active_boosts()
        except PersistenceReadFailure as exc:
            self.degraded = True
            logger.warning("Could not refresh boosts, keeping %d known: %s", len(self.boosts), exc)
            return False
        self._settle()
        self.boosts = list(boosts)
        if self.loaded:
            self.degraded = False
        self._rates_updated()
        return True

    async def start(self) -> None:
        """Load, then run the accrual loop, boost poller and autosave."""
        if self._timers:
            return
        await self.load()
        await self.refresh_boosts()
        loop = asyncio.get_running_loop()
        self._timers = [
            loop.create_task(self._run_accrual()),
            loop.create_task(self._run_poller()),
        ]
        if self.loaded:
            self.autosave.start()

    async def close(self) -> ReconciliationRecord | None:
        """Stop all timers and write the exit snapshot to the local cache."""
        for task in self._timers + list(self._background):
            task.cancel()
        for task in self._timers + list(self._background):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._timers = []
        self._background.clear()
        await self.autosave.stop()

        if not self.loaded:
            return None
        self._settle()
        return self.autosave.save_on_exit()

    # ── Player actions ───────────────────────────────────────────────

    def click(self) -> int:
        """Credit one click. Returns the cookies earned."""
        cpc = self.rates().cpc
        self.state = apply_click(self.state, cpc)
        return max(cpc, 0)

    def tick(self) -> float:
        """Credit passive generation for the time measured since the last tick."""
        now = self._clock()
        if self._last_tick is None:
            self._last_tick = now
            return 0.0
        elapsed = now - self._last_tick
        self._last_tick = now
        before = self.state.balance
        self.state = apply_tick(self.state, self.rates().cps, elapsed)
        return self.state.balance - before

    def try_purchase(self, upgrade_id: str) -> PurchaseResult:
        """Buy one unit of an upgrade at its current catalog price."""
        owned = self.state.count(upgrade_id)
        cost = self.catalog.cost_of(upgrade_id, owned)
        if cost is None:
            return PurchaseResult(False, upgrade_id, reason="Unknown upgrade")
        if not self.loaded:
            return PurchaseResult(
                False, upgrade_id, cost=cost, new_count=owned, reason=NOT_LOADED
            )

        self._settle()
        try:
            self.state = purchase_upgrade(self.state, upgrade_id, cost)
        except InsufficientFunds:
            return PurchaseResult(False, upgrade_id, cost=cost, new_count=owned, reason="Cannot afford")

        self._fire(self.backend.update_player(self.player_id, {
            "cookies": self.state.balance,
            "upgrades": dict(self.state.upgrade_counts),
        }))
        self._rates_updated()
        return PurchaseResult(True, upgrade_id, cost=cost, new_count=owned + 1)

    def purchase_shop_item(self, item: ShopItem) -> PurchaseResult:
        """Buy a premium item. Cookie-priced items are paid from the balance."""
        if not self.loaded:
            return PurchaseResult(False, item.id, reason=NOT_LOADED)
        if not can_buy(item.effect, self.profile):
            return PurchaseResult(False, item.id, reason="Already owned or lower tier")
        cost = 0.0
        fields: dict[str, Any] = {}
        if not item.real_money and item.price > 0:
            try:
                self.state = spend(self.state, item.price)
            except InsufficientFunds:
                return PurchaseResult(False, item.id, cost=item.price, reason="Cannot afford")
            cost = item.price
            fields["cookies"] = self.state.balance
        self.profile, updates = apply_effect(item.effect, self.profile)
        fields.update(updates)
        self._fire(self.backend.update_player(self.player_id, fields))
        return PurchaseResult(True, item.id, cost=cost)

    def claim_offer(self, offer: FreeOffer) -> PurchaseResult:
        """Claim a free limited-time offer."""
        if not self.loaded:
            return PurchaseResult(False, offer.id, reason=NOT_LOADED)
        if not offer.is_active(self._wall_clock()):
            return PurchaseResult(False, offer.id, reason="Offer expired")
        if not can_buy(offer.effect, self.profile):
            return PurchaseResult(False, offer.id, reason="Already owned or lower tier")
        self.profile, updates = apply_effect(offer.effect, self.profile)
        self._fire(self.backend.update_player(self.player_id, updates))
        return PurchaseResult(True, offer.id)

    # ── Queries ──────────────────────────────────────────────────────

    def active_boosts(self) -> ActiveBoostSet:
        return active(self.boosts, self._wall_clock())

    def rates(self) -> DerivedRates:
        """Effective click value and generation rate right now."""
        base = base_rates(self.state.upgrade_counts, self.catalog)
        return effective_rates(base, self.active_boosts())

    def snapshot(self) -> ReconciliationRecord:
        return ReconciliationRecord.capture(self.state, self.rates())

    # ── Private helpers ──────────────────────────────────────────────

    def _settle(self) -> None:
        """Credit accrual up to now at the current rate before it changes."""
        if self._last_tick is not None:
            self.tick()

    def _rates_updated(self) -> None:
        if self.rates().cps > 0:
            self._rates_changed.set()

    async def _run_accrual(self) -> None:
        while True:
            if self.rates().cps <= 0:
                # Nothing to generate; sleep until a purchase or boost changes that.
                self._rates_changed.clear()
                await self._rates_changed.wait()
                continue
            await asyncio.sleep(self.config.tick_interval)
            self.tick()

    async def _run_poller(self) -> None:
        while True:
            await asyncio.sleep(self.config.boost_poll_interval)
            if not self.loaded:
                await self.load()
                if self.loaded:
                    self.autosave.start()
            await self.refresh_boosts()

    def _fire(self, write: Coroutine[Any, Any, None]) -> None:
        """Schedule a remote write without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            write.close()
            logger.debug("No running event loop; remote write for %r skipped", self.player_id)
            return
        task = loop.create_task(self._guarded(write))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _guarded(self, write: Coroutine[Any, Any, None]) -> None:
        try:
            await write
        except PersistenceWriteFailure as exc:
            logger.warning("Write for %r failed; next autosave supersedes it: %s", self.player_id, exc)
        except Exception:
            logger.warning(
                "Write for %r raised unexpectedly; next autosave supersedes it",
                self.player_id, exc_info=True,
            )
