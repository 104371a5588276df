from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping

from clickerengine.boost import ActiveBoostSet
from clickerengine.catalog import UpgradeCatalog

logger = logging.getLogger(__name__)

BASE_CLICK_VALUE = 1.0


@dataclass(frozen=True)
class BaseRates:
    """Unrounded click power and generation from owned upgrades alone."""

    cpc: float = BASE_CLICK_VALUE
    cps: float = 0.0


@dataclass(frozen=True)
class DerivedRates:
    """Whole-cookie rates after boosts; recomputed on every read."""

    cpc: int = 1
    cps: int = 0


def base_rates(upgrade_counts: Mapping[str, int], catalog: UpgradeCatalog) -> BaseRates:
    """Sum per-unit upgrade bonuses on top of the base click value of 1."""
    cpc = BASE_CLICK_VALUE
    cps = 0.0

    for upgrade_id, count in upgrade_counts.items():
        if count <= 0:
            continue
        udef = catalog.get(upgrade_id)
        if udef is None:
            logger.debug("Ignoring %d owned units of unknown upgrade %r", count, upgrade_id)
            continue
        cpc += udef.cpc_bonus * count
        cps += udef.cps_bonus * count

    return BaseRates(cpc=max(cpc, BASE_CLICK_VALUE), cps=max(cps, 0.0))


def effective_rates(base: BaseRates, boosts: ActiveBoostSet) -> DerivedRates:
    """Apply boost factors and floor to whole cookies.

    Rounding happens only here so fractional bonuses accumulate before the
    floor instead of being lost per upgrade.
    """
    cpc = math.floor(base.cpc * boosts.click_multiplier + boosts.bonus_flat)
    cps = math.floor(base.cps * boosts.cps_multiplier)
    return DerivedRates(cpc=cpc, cps=cps)
