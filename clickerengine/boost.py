from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from clickerengine._types import as_utc, parse_timestamp


class BoostKind(Enum):
    CLICK_MULTIPLIER = "click_multiplier"
    CPS_MULTIPLIER = "cps_multiplier"
    BONUS_COOKIES = "bonus_cookies"


@dataclass(frozen=True)
class Boost:
    """A time-bounded global bonus created by an admin.

    A boost is live until ``expires_at``; it never needs to be deleted to stop
    applying.
    """

    id: str
    kind: BoostKind
    factor: float
    expires_at: datetime
    name: str = ""

    def __post_init__(self) -> None:
        if self.factor < 0:
            raise ValueError(f"Boost {self.id!r} has negative factor {self.factor!r}")
        object.__setattr__(self, "expires_at", as_utc(self.expires_at))

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > as_utc(now)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Boost:
        """Build a boost from a backend row.

        The row's ``type`` field names the kind explicitly; ``multiplier``
        carries the factor for every kind, including flat bonuses.
        """
        try:
            kind = BoostKind(record["type"])
        except (KeyError, ValueError):
            raise ValueError(f"Boost record has unknown type: {record.get('type')!r}") from None
        factor = record.get("multiplier", record.get("factor"))
        if isinstance(factor, bool) or not isinstance(factor, (int, float)):
            raise ValueError(f"Boost record has non-numeric factor: {factor!r}")
        if not math.isfinite(factor):
            raise ValueError(f"Boost record has non-finite factor: {factor!r}")
        if "expires_at" not in record:
            raise ValueError("Boost record has no expires_at")
        return cls(
            id=str(record.get("id", "")),
            kind=kind,
            factor=float(factor),
            expires_at=parse_timestamp(record["expires_at"]),
            name=str(record.get("name") or ""),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "multiplier": self.factor,
            "expires_at": self.expires_at.isoformat(),
            "name": self.name,
        }


@dataclass(frozen=True)
class ActiveBoostSet:
    """Boosts live at one instant, folded into their combined factors."""

    boosts: tuple[Boost, ...] = field(default_factory=tuple)
    click_multiplier: float = 1.0
    cps_multiplier: float = 1.0
    bonus_flat: float = 0.0

    def of_kind(self, kind: BoostKind) -> tuple[Boost, ...]:
        return tuple(b for b in self.boosts if b.kind is kind)

    def __len__(self) -> int:
        return len(self.boosts)


def active(boosts: Iterable[Boost], now: datetime) -> ActiveBoostSet:
    """Select the boosts whose expiry is still in the future and fold them.

    Multipliers of the same kind compound; flat bonuses add. There is no
    grace period: a boost expiring exactly at *now* is inactive.
    """
    now = as_utc(now)
    live: list[Boost] = []
    click_mult = 1.0
    cps_mult = 1.0
    bonus = 0.0

    for b in boosts:
        if not b.is_active(now):
            continue
        live.append(b)
        if b.kind is BoostKind.CLICK_MULTIPLIER:
            click_mult *= b.factor
        elif b.kind is BoostKind.CPS_MULTIPLIER:
            cps_mult *= b.factor
        elif b.kind is BoostKind.BONUS_COOKIES:
            bonus += b.factor

    return ActiveBoostSet(
        boosts=tuple(live),
        click_multiplier=click_mult,
        cps_multiplier=cps_mult,
        bonus_flat=bonus,
    )
