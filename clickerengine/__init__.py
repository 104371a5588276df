# clickerengine: idle clicker economy, boosts and reload-safe persistence

from clickerengine._types import Clock, WallClock, parse_timestamp
from clickerengine.errors import (
    ClickerEngineError,
    InsufficientFunds,
    MalformedCacheRecord,
    PersistenceReadFailure,
    PersistenceWriteFailure,
)
from clickerengine.config import EngineConfig
from clickerengine.cost_scaling import CostScaling
from clickerengine.catalog import UpgradeDef, UpgradeCatalog
from clickerengine.boost import Boost, BoostKind, ActiveBoostSet, active
from clickerengine.state import PlayerEconomyState
from clickerengine.pipeline import BaseRates, DerivedRates, base_rates, effective_rates
from clickerengine.accrual import apply_click, apply_tick, spend, purchase_upgrade
from clickerengine.cache import LocalCache, MemoryCache, FileCache
from clickerengine.persistence import PlayerRecord, PersistenceBackend, InMemoryBackend
from clickerengine.reconcile import (
    ReconciliationRecord,
    Reconciliation,
    reconcile,
    consume_cache,
)
from clickerengine.autosave import AutosaveScheduler
from clickerengine.shop import (
    MEMBERSHIP_TIERS,
    VipGrant,
    MembershipGrant,
    PlayerProfile,
    ShopItem,
    FreeOffer,
    is_owned,
    can_buy,
    apply_effect,
    claimable_offers,
)
from clickerengine.session import GameSession, PurchaseResult
from clickerengine.simulation import ManualClock, Simulation, SimulationReport
from clickerengine.formatting import format_number, format_text_report

__all__ = [
    # Types
    "Clock",
    "WallClock",
    "parse_timestamp",
    # Errors
    "ClickerEngineError",
    "InsufficientFunds",
    "MalformedCacheRecord",
    "PersistenceReadFailure",
    "PersistenceWriteFailure",
    # Config
    "EngineConfig",
    # Catalog
    "CostScaling",
    "UpgradeDef",
    "UpgradeCatalog",
    # Boosts
    "Boost",
    "BoostKind",
    "ActiveBoostSet",
    "active",
    # Accrual
    "PlayerEconomyState",
    "BaseRates",
    "DerivedRates",
    "base_rates",
    "effective_rates",
    "apply_click",
    "apply_tick",
    "spend",
    "purchase_upgrade",
    # Persistence
    "LocalCache",
    "MemoryCache",
    "FileCache",
    "PlayerRecord",
    "PersistenceBackend",
    "InMemoryBackend",
    # Reconciliation
    "ReconciliationRecord",
    "Reconciliation",
    "reconcile",
    "consume_cache",
    # Autosave
    "AutosaveScheduler",
    # Shop
    "MEMBERSHIP_TIERS",
    "VipGrant",
    "MembershipGrant",
    "PlayerProfile",
    "ShopItem",
    "FreeOffer",
    "is_owned",
    "can_buy",
    "apply_effect",
    "claimable_offers",
    # Session
    "GameSession",
    "PurchaseResult",
    # Simulation
    "ManualClock",
    "Simulation",
    "SimulationReport",
    # Formatting
    "format_number",
    "format_text_report",
]
