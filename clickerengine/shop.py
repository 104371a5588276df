"""Premium shop items and free limited-time offers.

Each item carries an explicit effect describing what it grants; nothing is
inferred from display names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Union

from clickerengine._types import as_utc

MEMBERSHIP_TIERS: tuple[str, ...] = ("free", "bronze", "silver", "gold", "diamond")


@dataclass(frozen=True)
class VipGrant:
    """Grants the VIP badge."""


@dataclass(frozen=True)
class MembershipGrant:
    """Sets the membership tier."""

    tier: str

    def __post_init__(self) -> None:
        if self.tier not in MEMBERSHIP_TIERS:
            raise ValueError(
                f"Unknown membership tier: {self.tier!r}. Expected one of {list(MEMBERSHIP_TIERS)}"
            )


ShopEffect = Union[VipGrant, MembershipGrant]


@dataclass(frozen=True)
class PlayerProfile:
    """Non-economy player flags the shop reads and writes."""

    is_vip: bool = False
    membership: str = "free"


@dataclass(frozen=True)
class ShopItem:
    """Something a player can buy, for real money or cookies."""

    id: str
    name: str
    effect: ShopEffect
    price: float = 0.0
    real_money: bool = True
    description: str = ""


@dataclass(frozen=True)
class FreeOffer:
    """A limited-time free grant announced by an admin."""

    id: str
    effect: ShopEffect
    expires_at: datetime
    name: str = ""

    def is_active(self, now: datetime) -> bool:
        return as_utc(self.expires_at) > as_utc(now)


def tier_rank(tier: str) -> int:
    """Position of *tier* in the membership ladder; unknown tiers rank as free."""
    try:
        return MEMBERSHIP_TIERS.index(tier)
    except ValueError:
        return 0


def is_owned(effect: ShopEffect, profile: PlayerProfile) -> bool:
    if isinstance(effect, VipGrant):
        return profile.is_vip
    if isinstance(effect, MembershipGrant):
        return profile.membership == effect.tier
    raise TypeError(f"Unknown shop effect: {effect!r}")


def can_buy(effect: ShopEffect, profile: PlayerProfile) -> bool:
    """Memberships can only move up the ladder; VIP can be bought once."""
    if isinstance(effect, VipGrant):
        return not profile.is_vip
    if isinstance(effect, MembershipGrant):
        return tier_rank(effect.tier) > tier_rank(profile.membership)
    raise TypeError(f"Unknown shop effect: {effect!r}")


def apply_effect(
    effect: ShopEffect, profile: PlayerProfile
) -> tuple[PlayerProfile, dict[str, Any]]:
    """Return the updated profile and the backend fields to write."""
    if isinstance(effect, VipGrant):
        return PlayerProfile(is_vip=True, membership=profile.membership), {"is_vip": True}
    if isinstance(effect, MembershipGrant):
        return (
            PlayerProfile(is_vip=profile.is_vip, membership=effect.tier),
            {"membership": effect.tier},
        )
    raise TypeError(f"Unknown shop effect: {effect!r}")


def claimable_offers(
    offers: Iterable[FreeOffer], profile: PlayerProfile, now: datetime
) -> list[FreeOffer]:
    """Active offers that would give the player something new.

    Membership offers at or below the current tier are hidden.
    """
    return [o for o in offers if o.is_active(now) and can_buy(o.effect, profile)]
