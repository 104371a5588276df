from __future__ import annotations


class ClickerEngineError(Exception):
    """Base class for engine errors."""


class InsufficientFunds(ClickerEngineError):
    """A spend or purchase was attempted with ``balance < cost``."""

    def __init__(self, balance: float, cost: float) -> None:
        super().__init__(f"Cannot spend {cost:g} with a balance of {balance:g}")
        self.balance = balance
        self.cost = cost


class MalformedCacheRecord(ClickerEngineError):
    """The local cache held data that is not a valid reconciliation record."""


class PersistenceWriteFailure(ClickerEngineError):
    """A write to the persistence backend failed."""


class PersistenceReadFailure(ClickerEngineError):
    """A read from the persistence backend failed."""
