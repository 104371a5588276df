"""Tests for shop module."""
from datetime import datetime, timedelta, timezone

import pytest

from clickerengine.shop import (
    FreeOffer,
    MembershipGrant,
    PlayerProfile,
    VipGrant,
    apply_effect,
    can_buy,
    claimable_offers,
    is_owned,
    tier_rank,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def test_unknown_tier_rejected():
    with pytest.raises(ValueError):
        MembershipGrant("platinum")


def test_tier_rank():
    assert tier_rank("free") == 0
    assert tier_rank("diamond") == 4
    assert tier_rank("nonsense") == 0


def test_is_owned():
    profile = PlayerProfile(is_vip=True, membership="silver")
    assert is_owned(VipGrant(), profile)
    assert is_owned(MembershipGrant("silver"), profile)
    assert not is_owned(MembershipGrant("gold"), profile)


@pytest.mark.parametrize("current,target,expected", [
    ("free", "bronze", True),
    ("bronze", "diamond", True),
    ("gold", "gold", False),
    ("gold", "silver", False),
])
def test_membership_only_upgrades(current, target, expected):
    assert can_buy(MembershipGrant(target), PlayerProfile(membership=current)) is expected


def test_vip_once():
    assert can_buy(VipGrant(), PlayerProfile())
    assert not can_buy(VipGrant(), PlayerProfile(is_vip=True))


def test_apply_effect():
    profile = PlayerProfile(membership="bronze")
    vip, fields = apply_effect(VipGrant(), profile)
    assert vip == PlayerProfile(is_vip=True, membership="bronze")
    assert fields == {"is_vip": True}

    gold, fields = apply_effect(MembershipGrant("gold"), vip)
    assert gold == PlayerProfile(is_vip=True, membership="gold")
    assert fields == {"membership": "gold"}


def test_unknown_effect():
    with pytest.raises(TypeError):
        is_owned("vip", PlayerProfile())


def test_claimable_offers():
    later = NOW + timedelta(hours=1)
    offers = [
        FreeOffer("vip", VipGrant(), later),
        FreeOffer("silver", MembershipGrant("silver"), later),
        FreeOffer("bronze", MembershipGrant("bronze"), later),
        FreeOffer("gold-expired", MembershipGrant("gold"), NOW),
    ]
    profile = PlayerProfile(is_vip=True, membership="bronze")
    assert [o.id for o in claimable_offers(offers, profile, NOW)] == ["silver"]
