"""Tests for simulation module."""
from datetime import timedelta

import pytest

from clickerengine.boost import Boost, BoostKind
from clickerengine.catalog import UpgradeCatalog, UpgradeDef
from clickerengine.cost_scaling import CostScaling
from clickerengine.simulation import ManualClock, Simulation


def _make_catalog() -> UpgradeCatalog:
    return UpgradeCatalog(
        upgrades=[
            UpgradeDef("cursor", cpc_bonus=0.1, base_cost=15,
                       cost_scaling=CostScaling.exponential(1.15)),
            UpgradeDef("grandma", cps_bonus=1.0, base_cost=100,
                       cost_scaling=CostScaling.exponential(1.15)),
        ]
    )


def test_manual_clock():
    clock = ManualClock()
    assert clock() == 0.0
    clock.advance(90)
    assert clock() == 90.0
    assert clock.wall() == clock.start + timedelta(seconds=90)


def test_clicks_only_without_purchases():
    catalog = UpgradeCatalog(upgrades=[UpgradeDef("castle", base_cost=1e9)])
    report = Simulation(catalog, duration=10, clicks_per_second=2).run()
    assert report.clicks == 20
    assert report.final_balance == 20
    assert report.passive_income == 0
    assert report.purchases == []


def test_fractional_click_rate_carries_over():
    catalog = UpgradeCatalog(upgrades=[UpgradeDef("castle", base_cost=1e9)])
    report = Simulation(catalog, duration=10, clicks_per_second=0.5).run()
    assert report.clicks == 5


def test_buys_and_produces():
    report = Simulation(_make_catalog(), duration=300, clicks_per_second=5).run()
    assert report.purchases
    assert report.upgrade_counts.get("cursor", 0) > 0
    assert report.passive_income > 0
    assert report.final_cps > 0
    assert report.purchases_per_minute > 0
    spent = sum(p.cost for p in report.purchases)
    assert report.final_balance == pytest.approx(report.total_income - spent)


def test_boost_raises_income():
    catalog = UpgradeCatalog(upgrades=[UpgradeDef("castle", base_cost=1e9)])
    sim = Simulation(catalog, duration=10, clicks_per_second=1)
    sim.backend.boosts.append(
        Boost("b", BoostKind.CLICK_MULTIPLIER, 3.0, expires_at=sim.clock.start + timedelta(seconds=5))
    )
    report = sim.run()
    # 4 boosted clicks (t=1..4), then 6 plain clicks once the boost expires at t=5
    assert report.click_income == 4 * 3 + 6


def test_rejects_bad_resolution():
    with pytest.raises(ValueError):
        Simulation(_make_catalog(), tick_resolution=0)


def test_rejects_free_upgrade_catalog():
    catalog = UpgradeCatalog(upgrades=[UpgradeDef("freebie", cps_bonus=1.0)])
    with pytest.raises(ValueError, match="base_cost"):
        Simulation(catalog, duration=2)


def test_free_price_from_custom_curve_is_skipped():
    # first unit costs 10, every later unit is free
    scaling = CostScaling.custom(lambda base, owned: base if owned == 0 else 0.0)
    catalog = UpgradeCatalog(
        upgrades=[UpgradeDef("gift", cps_bonus=1.0, base_cost=10, cost_scaling=scaling)]
    )
    report = Simulation(catalog, duration=5, clicks_per_second=5).run()
    assert report.upgrade_counts == {"gift": 1}
    assert len(report.purchases) == 1
