"""Contract for the remote player store, plus an in-memory implementation."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from clickerengine.boost import Boost
from clickerengine.errors import PersistenceReadFailure, PersistenceWriteFailure
from clickerengine.state import PlayerEconomyState

logger = logging.getLogger(__name__)


@dataclass
class PlayerRecord:
    """A player row as stored by the backend."""

    id: str
    username: str = ""
    cookies: float = 0.0
    upgrades: dict[str, int] = field(default_factory=dict)
    cookies_per_click: int = 1
    cookies_per_second: int = 0
    is_vip: bool = False
    membership: str = "free"
    clan_id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PlayerRecord:
        return cls(
            id=str(record["id"]),
            username=str(record.get("username") or ""),
            cookies=max(float(record.get("cookies") or 0.0), 0.0),
            upgrades={
                str(k): max(int(v or 0), 0)
                for k, v in (record.get("upgrades") or {}).items()
            },
            cookies_per_click=int(record.get("cookies_per_click") or 1),
            cookies_per_second=int(record.get("cookies_per_second") or 0),
            is_vip=bool(record.get("is_vip", False)),
            membership=str(record.get("membership") or "free"),
            clan_id=record.get("clan_id"),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "cookies": self.cookies,
            "upgrades": dict(self.upgrades),
            "cookies_per_click": self.cookies_per_click,
            "cookies_per_second": self.cookies_per_second,
            "is_vip": self.is_vip,
            "membership": self.membership,
            "clan_id": self.clan_id,
        }

    def to_state(self) -> PlayerEconomyState:
        return PlayerEconomyState(balance=self.cookies, upgrade_counts=self.upgrades)


class PersistenceBackend(ABC):
    """Remote store the engine reads players and boosts from and writes to.

    Implementations raise PersistenceReadFailure / PersistenceWriteFailure
    for transport or server errors.
    """

    @abstractmethod
    async def fetch_player(self, player_id: str) -> PlayerRecord | None: ...

    @abstractmethod
    async def update_player(self, player_id: str, fields: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def list_active_boosts(self) -> list[Boost]: ...


class InMemoryBackend(PersistenceBackend):
    """Backend held in a dict, with optional latency and injected failures."""

    def __init__(
        self,
        players: list[PlayerRecord] | None = None,
        boosts: list[Boost] | None = None,
        latency: float = 0.0,
    ) -> None:
        self.players: dict[str, PlayerRecord] = {p.id: p for p in players or []}
        self.boosts: list[Boost] = list(boosts or [])
        self.latency = latency
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _delay(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def fetch_player(self, player_id: str) -> PlayerRecord | None:
        await self._delay()
        if self.fail_reads:
            raise PersistenceReadFailure(f"fetch_player({player_id!r}) failed")
        player = self.players.get(player_id)
        if player is None:
            return None
        return PlayerRecord.from_record(player.to_record())

    async def update_player(self, player_id: str, fields: Mapping[str, Any]) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._delay()
            if self.fail_writes:
                raise PersistenceWriteFailure(f"update_player({player_id!r}) failed")
            player = self.players.get(player_id)
            if player is None:
                raise PersistenceWriteFailure(f"Unknown player: {player_id!r}")
            merged = player.to_record()
            merged.update(fields)
            self.players[player_id] = PlayerRecord.from_record(merged)
            self.writes.append((player_id, dict(fields)))
        finally:
            self.in_flight -= 1

    async def list_active_boosts(self) -> list[Boost]:
        await self._delay()
        if self.fail_reads:
            raise PersistenceReadFailure("list_active_boosts() failed")
        return list(self.boosts)
