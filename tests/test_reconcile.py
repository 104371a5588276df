"""Tests for reconcile module."""
import json

import pytest

from clickerengine.cache import MemoryCache
from clickerengine.errors import MalformedCacheRecord
from clickerengine.pipeline import DerivedRates
from clickerengine.reconcile import (
    ReconciliationRecord,
    consume_cache,
    reconcile,
)
from clickerengine.state import PlayerEconomyState

KEY = "cookiePlayerData_p1"


def _server() -> PlayerEconomyState:
    return PlayerEconomyState(balance=500, upgrade_counts={"cursor": 4})


def test_no_cache_uses_server():
    result = reconcile(_server(), None)
    assert result.state == _server()
    assert not result.must_persist


def test_no_cache_is_idempotent():
    once = reconcile(_server(), None)
    twice = reconcile(once.state, None)
    assert twice.state.balance == once.state.balance


@pytest.mark.parametrize("cached,expected,must_persist", [
    (800.0, 800.0, True),
    (500.0, 500.0, False),
    (200.0, 500.0, False),
])
def test_balance_is_max(cached, expected, must_persist):
    record = ReconciliationRecord(balance=cached, upgrade_counts={"cursor": 9})
    result = reconcile(_server(), record)
    assert result.state.balance == expected
    assert result.state.balance == max(cached, _server().balance)
    assert result.must_persist is must_persist


def test_upgrades_come_from_server():
    record = ReconciliationRecord(balance=800, upgrade_counts={"cursor": 9, "farm": 1})
    result = reconcile(_server(), record)
    assert dict(result.state.upgrade_counts) == {"cursor": 4}


def test_record_serialization_uses_backend_field_names():
    record = ReconciliationRecord(
        balance=123.5, upgrade_counts={"cursor": 2}, rates=DerivedRates(cpc=3, cps=7)
    )
    data = json.loads(record.to_bytes())
    assert data == {
        "cookies": 123.5,
        "upgrades": {"cursor": 2},
        "cookies_per_click": 3,
        "cookies_per_second": 7,
    }
    assert ReconciliationRecord.from_bytes(record.to_bytes()) == record


def test_capture():
    state = PlayerEconomyState(balance=42, upgrade_counts={"grandma": 1})
    record = ReconciliationRecord.capture(state, DerivedRates(cpc=1, cps=1))
    assert record.balance == 42
    assert record.upgrade_counts == {"grandma": 1}
    assert record.rates.cps == 1


@pytest.mark.parametrize("raw", [
    b"not json",
    b"\xff\xfe",
    b"[1, 2, 3]",
    b"{}",
    b'{"cookies": -5}',
    b'{"cookies": "lots"}',
    b'{"cookies": true}',
    b'{"cookies": 10, "upgrades": []}',
    b'{"cookies": 10, "upgrades": {"cursor": -1}}',
    b'{"cookies": 10, "upgrades": {"cursor": 1.5}}',
    b'{"cookies": 10, "cookies_per_second": null}',
])
def test_from_bytes_rejects_malformed(raw):
    with pytest.raises(MalformedCacheRecord):
        ReconciliationRecord.from_bytes(raw)


def test_consume_absent():
    assert consume_cache(MemoryCache(), KEY) is None


def test_consume_is_single_use():
    cache = MemoryCache()
    cache.set(KEY, ReconciliationRecord(balance=10).to_bytes())
    record = consume_cache(cache, KEY)
    assert record is not None and record.balance == 10
    assert cache.get(KEY) is None
    assert consume_cache(cache, KEY) is None


def test_consume_malformed_is_treated_as_absent(caplog):
    cache = MemoryCache()
    cache.set(KEY, b'{"cookies": ')
    with caplog.at_level("WARNING"):
        assert consume_cache(cache, KEY) is None
    assert cache.get(KEY) is None
    assert "Discarding cache record" in caplog.text


def test_consume_only_touches_own_key():
    cache = MemoryCache()
    cache.set("cookiePlayerData_p2", ReconciliationRecord(balance=99).to_bytes())
    assert consume_cache(cache, KEY) is None
    assert cache.keys() == ["cookiePlayerData_p2"]
