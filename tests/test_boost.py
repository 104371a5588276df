"""Tests for boost module."""
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from clickerengine.boost import ActiveBoostSet, Boost, BoostKind, active

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _boost(id: str, kind: BoostKind, factor: float, seconds: float) -> Boost:
    return Boost(id=id, kind=kind, factor=factor, expires_at=NOW + timedelta(seconds=seconds))


def test_empty_set_is_neutral():
    result = active([], NOW)
    assert result.click_multiplier == 1.0
    assert result.cps_multiplier == 1.0
    assert result.bonus_flat == 0.0
    assert len(result) == 0


def test_expiry_boundary_is_exclusive():
    boosts = [
        _boost("past", BoostKind.CLICK_MULTIPLIER, 2.0, -1),
        _boost("exact", BoostKind.CLICK_MULTIPLIER, 3.0, 0),
        _boost("future", BoostKind.CLICK_MULTIPLIER, 5.0, 1),
    ]
    result = active(boosts, NOW)
    assert [b.id for b in result.boosts] == ["future"]
    assert result.click_multiplier == 5.0


def test_folds_by_kind():
    boosts = [
        _boost("c1", BoostKind.CLICK_MULTIPLIER, 2.0, 60),
        _boost("c2", BoostKind.CLICK_MULTIPLIER, 3.0, 60),
        _boost("s1", BoostKind.CPS_MULTIPLIER, 1.5, 60),
        _boost("b1", BoostKind.BONUS_COOKIES, 10, 60),
        _boost("b2", BoostKind.BONUS_COOKIES, 5, 60),
    ]
    result = active(boosts, NOW)
    assert result.click_multiplier == pytest.approx(6.0)
    assert result.cps_multiplier == pytest.approx(1.5)
    assert result.bonus_flat == pytest.approx(15.0)
    assert len(result.of_kind(BoostKind.BONUS_COOKIES)) == 2


def test_fold_is_order_independent():
    boosts = [
        _boost("c1", BoostKind.CLICK_MULTIPLIER, 2.0, 60),
        _boost("c2", BoostKind.CLICK_MULTIPLIER, 0.5, 60),
        _boost("s1", BoostKind.CPS_MULTIPLIER, 4.0, 60),
        _boost("b1", BoostKind.BONUS_COOKIES, 3, 60),
        _boost("old", BoostKind.CPS_MULTIPLIER, 100.0, -60),
    ]
    results = {
        (r.click_multiplier, r.cps_multiplier, r.bonus_flat)
        for r in (active(p, NOW) for p in itertools.permutations(boosts))
    }
    assert results == {(1.0, 4.0, 3.0)}


def test_naive_now_is_utc():
    boost = _boost("c1", BoostKind.CLICK_MULTIPLIER, 2.0, 60)
    result = active([boost], datetime(2024, 6, 1, 12, 0))
    assert result.click_multiplier == 2.0


def test_from_record():
    boost = Boost.from_record({
        "id": "abc",
        "name": "Double Click Weekend",
        "type": "click_multiplier",
        "multiplier": 2,
        "expires_at": "2024-06-01T13:00:00Z",
    })
    assert boost.kind is BoostKind.CLICK_MULTIPLIER
    assert boost.factor == 2.0
    assert boost.is_active(NOW)
    assert Boost.from_record(boost.to_record()) == boost


def test_from_record_ignores_name_for_kind():
    boost = Boost.from_record({
        "id": "x",
        "name": "FREE VIP cps multiplier",
        "type": "bonus_cookies",
        "multiplier": 100,
        "expires_at": "2024-06-01T13:00:00Z",
    })
    assert boost.kind is BoostKind.BONUS_COOKIES


@pytest.mark.parametrize("record", [
    {"type": "mystery", "multiplier": 2, "expires_at": "2024-06-01T13:00:00Z"},
    {"multiplier": 2, "expires_at": "2024-06-01T13:00:00Z"},
    {"type": "cps_multiplier", "multiplier": "two", "expires_at": "2024-06-01T13:00:00Z"},
    {"type": "cps_multiplier", "multiplier": float("nan"), "expires_at": "2024-06-01T13:00:00Z"},
    {"type": "cps_multiplier", "multiplier": 2},
    {"type": "click_multiplier", "multiplier": -2, "expires_at": "2024-06-01T13:00:00Z"},
])
def test_from_record_rejects_bad_rows(record):
    with pytest.raises(ValueError):
        Boost.from_record(record)


def test_default_active_set():
    s = ActiveBoostSet()
    assert s.click_multiplier == 1.0 and s.bonus_flat == 0.0


def test_negative_factor_rejected():
    with pytest.raises(ValueError, match="negative factor"):
        _boost("bad", BoostKind.BONUS_COOKIES, -5, 60)


def test_zero_click_multiplier_floors_to_zero():
    result = active([_boost("freeze", BoostKind.CLICK_MULTIPLIER, 0.0, 60)], NOW)
    assert result.click_multiplier == 0.0
