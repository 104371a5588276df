from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable

from clickerengine.cache import LocalCache
from clickerengine.errors import PersistenceWriteFailure
from clickerengine.persistence import PersistenceBackend
from clickerengine.reconcile import ReconciliationRecord

logger = logging.getLogger(__name__)


def remote_fields(record: ReconciliationRecord) -> dict[str, Any]:
    """Backend fields pushed by a periodic save."""
    return {
        "cookies": record.balance,
        "cookies_per_click": record.rates.cpc,
        "cookies_per_second": record.rates.cps,
    }


class AutosaveScheduler:
    """Pushes the session snapshot to the backend on a fixed interval.

    At most one remote write is outstanding; a trigger that fires while one
    is still running is dropped and counted. ``save_on_exit`` is the
    synchronous pre-termination path and only touches the local cache.
    """

    def __init__(
        self,
        player_id: str,
        backend: PersistenceBackend,
        cache: LocalCache,
        snapshot: Callable[[], ReconciliationRecord],
        cache_key: str,
        interval: float = 3.0,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Autosave interval must be positive, got {interval!r}")
        self.player_id = player_id
        self.backend = backend
        self.cache = cache
        self.cache_key = cache_key
        self.interval = interval
        self._snapshot = snapshot
        self._timer: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None

        self.writes_started = 0
        self.writes_succeeded = 0
        self.writes_failed = 0
        self.writes_dropped = 0

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def write_in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def start(self) -> None:
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the timer and any outstanding write."""
        for task in (self._timer, self._in_flight):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._timer = None
        self._in_flight = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.trigger()

    def trigger(self) -> bool:
        """Start a remote write unless one is already running."""
        if self.write_in_flight:
            self.writes_dropped += 1
            logger.debug("Autosave for %r skipped: previous write still running", self.player_id)
            return False
        fields = remote_fields(self._snapshot())
        self.writes_started += 1
        self._in_flight = asyncio.get_running_loop().create_task(self._push(fields))
        return True

    async def _push(self, fields: dict[str, Any]) -> None:
        try:
            await self.backend.update_player(self.player_id, fields)
        except PersistenceWriteFailure as exc:
            self.writes_failed += 1
            logger.warning("Autosave for %r failed, will retry next interval: %s", self.player_id, exc)
            return
        except Exception:
            self.writes_failed += 1
            logger.warning(
                "Autosave for %r raised unexpectedly, will retry next interval",
                self.player_id, exc_info=True,
            )
            return
        self.writes_succeeded += 1

    def save_on_exit(self) -> ReconciliationRecord:
        """Write the snapshot to the local cache for the next session to merge."""
        record = self._snapshot()
        self.cache.set(self.cache_key, record.to_bytes())
        logger.info("Saved exit snapshot for %r (balance=%.0f)", self.player_id, record.balance)
        return record
