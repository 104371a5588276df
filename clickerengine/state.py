from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class PlayerEconomyState:
    """A player's balance and owned upgrades at one instant.

    Values are immutable: every engine operation returns a new state.
    """

    balance: float = 0.0
    upgrade_counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.balance < 0:
            raise ValueError(f"balance must be non-negative, got {self.balance!r}")
        counts = dict(self.upgrade_counts)
        for upgrade_id, count in counts.items():
            if count < 0:
                raise ValueError(f"Upgrade {upgrade_id!r} has negative count {count!r}")
        object.__setattr__(self, "upgrade_counts", MappingProxyType(counts))

    def count(self, upgrade_id: str) -> int:
        return self.upgrade_counts.get(upgrade_id, 0)

    def with_balance(self, balance: float) -> PlayerEconomyState:
        return replace(self, balance=balance)

    def with_count(self, upgrade_id: str, count: int) -> PlayerEconomyState:
        counts = dict(self.upgrade_counts)
        counts[upgrade_id] = count
        return replace(self, upgrade_counts=counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlayerEconomyState):
            return NotImplemented
        return (
            self.balance == other.balance
            and dict(self.upgrade_counts) == dict(other.upgrade_counts)
        )

    def __hash__(self) -> int:
        return hash((self.balance, frozenset(self.upgrade_counts.items())))
