from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from clickerengine.boost import Boost
from clickerengine.cache import MemoryCache
from clickerengine.catalog import UpgradeCatalog
from clickerengine.config import EngineConfig
from clickerengine.persistence import InMemoryBackend, PlayerRecord
from clickerengine.session import GameSession

MAX_TICKS = 10_000_000


class ManualClock:
    """Clock advanced explicitly, for headless runs and tests.

    Calling the instance gives monotonic seconds; ``wall()`` gives the
    matching wall-clock time from *start*.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self.now = 0.0
        self.start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def wall(self) -> datetime:
        return self.start + timedelta(seconds=self.now)


@dataclass(frozen=True)
class PurchaseEvent:
    time: float
    upgrade_id: str
    cost: float
    balance_after: float


@dataclass
class SimulationReport:
    """Results of a headless playthrough."""

    catalog_name: str = ""
    duration: float = 0.0
    clicks_per_second: float = 0.0
    clicks: int = 0
    click_income: float = 0.0
    passive_income: float = 0.0
    final_balance: float = 0.0
    final_cpc: int = 1
    final_cps: int = 0
    upgrade_counts: dict[str, int] = field(default_factory=dict)
    purchases: list[PurchaseEvent] = field(default_factory=list)

    @property
    def purchases_per_minute(self) -> float:
        if self.duration <= 0:
            return 0.0
        return len(self.purchases) / (self.duration / 60.0)

    @property
    def total_income(self) -> float:
        return self.click_income + self.passive_income


class Simulation:
    """Plays a session against an in-memory backend on a manual clock.

    Each tick it clicks at a steady rate, then buys the cheapest affordable
    upgrade until nothing is affordable.
    """

    def __init__(
        self,
        catalog: UpgradeCatalog,
        duration: float = 600.0,
        clicks_per_second: float = 5.0,
        boosts: list[Boost] | None = None,
        tick_resolution: float = 1.0,
        config: EngineConfig | None = None,
    ) -> None:
        if tick_resolution <= 0:
            raise ValueError(f"tick_resolution must be positive, got {tick_resolution!r}")
        self.catalog = catalog
        self.duration = duration
        self.clicks_per_second = clicks_per_second
        self.tick_resolution = tick_resolution
        self.config = config or EngineConfig()
        self.clock = ManualClock()
        self.backend = InMemoryBackend(
            players=[PlayerRecord(id="simulation", username="simulation")],
            boosts=boosts,
        )
        self.session = GameSession(
            player_id="simulation",
            catalog=catalog,
            backend=self.backend,
            cache=MemoryCache(),
            config=self.config,
            clock=self.clock,
            wall_clock=self.clock.wall,
        )

    def run(self) -> SimulationReport:
        return asyncio.run(self.run_async())

    async def run_async(self) -> SimulationReport:
        session = self.session
        report = SimulationReport(
            catalog_name=self.config.name,
            duration=self.duration,
            clicks_per_second=self.clicks_per_second,
        )
        await session.load()
        await session.refresh_boosts()

        click_carry = 0.0
        ticks = 0
        while self.clock.now < self.duration and ticks < MAX_TICKS:
            ticks += 1
            self.clock.advance(self.tick_resolution)
            report.passive_income += session.tick()

            click_carry += self.clicks_per_second * self.tick_resolution
            clicks = int(click_carry)
            click_carry -= clicks
            for _ in range(clicks):
                report.click_income += session.click()
            report.clicks += clicks

            self._buy_cheapest(report)
            # Let fire-and-forget writes run between ticks.
            await asyncio.sleep(0)

        await session.close()
        rates = session.rates()
        report.final_balance = session.state.balance
        report.final_cpc = rates.cpc
        report.final_cps = rates.cps
        report.upgrade_counts = dict(session.state.upgrade_counts)
        return report

    def _buy_cheapest(self, report: SimulationReport) -> None:
        session = self.session
        while True:
            costs = {
                u.id: self.catalog.cost_of(u.id, session.state.count(u.id))
                for u in self.catalog
            }
            # A free price would be bought forever within one tick.
            affordable = {
                k: v for k, v in costs.items() if 0 < v <= session.state.balance
            }
            if not affordable:
                return
            upgrade_id = min(affordable, key=lambda k: affordable[k])
            result = session.try_purchase(upgrade_id)
            if not result.success:
                return
            report.purchases.append(
                PurchaseEvent(
                    time=self.clock.now,
                    upgrade_id=upgrade_id,
                    cost=result.cost,
                    balance_after=session.state.balance,
                )
            )
