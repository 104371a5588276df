"""Merging the unload-time local snapshot with the server's copy on load."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from clickerengine.cache import LocalCache
from clickerengine.errors import MalformedCacheRecord
from clickerengine.pipeline import DerivedRates
from clickerengine.state import PlayerEconomyState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationRecord:
    """Snapshot written when a session ends, read once when the next begins."""

    balance: float
    upgrade_counts: Mapping[str, int] = field(default_factory=dict)
    rates: DerivedRates = field(default_factory=DerivedRates)

    @classmethod
    def capture(cls, state: PlayerEconomyState, rates: DerivedRates) -> ReconciliationRecord:
        return cls(
            balance=state.balance,
            upgrade_counts=dict(state.upgrade_counts),
            rates=rates,
        )

    def to_bytes(self) -> bytes:
        data = {
            "cookies": self.balance,
            "upgrades": dict(self.upgrade_counts),
            "cookies_per_click": self.rates.cpc,
            "cookies_per_second": self.rates.cps,
        }
        return json.dumps(data, sort_keys=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> ReconciliationRecord:
        """Parse a cached record. Raises MalformedCacheRecord on any defect."""
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedCacheRecord(f"Unparsable cache record: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedCacheRecord(f"Cache record is a {type(data).__name__}, not an object")

        balance = data.get("cookies")
        if not _is_number(balance) or balance < 0:
            raise MalformedCacheRecord(f"Cache record has invalid cookies: {balance!r}")

        upgrades = data.get("upgrades") or {}
        if not isinstance(upgrades, dict):
            raise MalformedCacheRecord("Cache record upgrades is not an object")
        counts: dict[str, int] = {}
        for upgrade_id, count in upgrades.items():
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise MalformedCacheRecord(
                    f"Cache record has invalid count for {upgrade_id!r}: {count!r}"
                )
            counts[upgrade_id] = count

        cpc = data.get("cookies_per_click", 1)
        cps = data.get("cookies_per_second", 0)
        if not _is_number(cpc) or not _is_number(cps):
            raise MalformedCacheRecord("Cache record has non-numeric rates")

        return cls(
            balance=float(balance),
            upgrade_counts=counts,
            rates=DerivedRates(cpc=int(cpc), cps=int(cps)),
        )


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of merging server and cached state."""

    state: PlayerEconomyState
    must_persist: bool = False


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def reconcile(
    server_state: PlayerEconomyState,
    local_cache: ReconciliationRecord | None,
) -> Reconciliation:
    """Pick the authoritative state for a new session.

    The higher of the two balances wins. Everything else comes from the
    server, which owns upgrade counts. ``must_persist`` is set only when
    the cache was strictly ahead, meaning the server copy is stale.
    """
    if local_cache is None:
        return Reconciliation(state=server_state, must_persist=False)

    if local_cache.balance > server_state.balance:
        return Reconciliation(
            state=server_state.with_balance(local_cache.balance),
            must_persist=True,
        )
    return Reconciliation(state=server_state, must_persist=False)


def consume_cache(cache: LocalCache, key: str) -> ReconciliationRecord | None:
    """Read and remove the record under *key*.

    The record is deleted whether or not it parses.
    """
    raw = cache.get(key)
    if raw is None:
        return None
    cache.delete(key)
    try:
        record = ReconciliationRecord.from_bytes(raw)
    except MalformedCacheRecord as exc:
        logger.warning("Discarding cache record %r: %s", key, exc)
        return None
    logger.info("Consumed cache record %r (balance=%.0f)", key, record.balance)
    return record
