from __future__ import annotations

from clickerengine.errors import InsufficientFunds
from clickerengine.state import PlayerEconomyState


def apply_click(state: PlayerEconomyState, cpc: int) -> PlayerEconomyState:
    """Credit one click worth *cpc* cookies."""
    # Boost factors are non-negative, so only a zero multiplier gets here.
    if cpc <= 0:
        return state
    return state.with_balance(state.balance + cpc)


def apply_tick(
    state: PlayerEconomyState, cps: int, elapsed_seconds: float
) -> PlayerEconomyState:
    """Credit passive generation for *elapsed_seconds* of measured time."""
    if cps <= 0 or elapsed_seconds <= 0:
        return state
    return state.with_balance(state.balance + cps * elapsed_seconds)


def spend(state: PlayerEconomyState, amount: float) -> PlayerEconomyState:
    """Deduct *amount*. Raises InsufficientFunds rather than going negative."""
    if amount < 0:
        raise ValueError(f"Cannot spend a negative amount: {amount!r}")
    if state.balance < amount:
        raise InsufficientFunds(state.balance, amount)
    return state.with_balance(state.balance - amount)


def purchase_upgrade(
    state: PlayerEconomyState, upgrade_id: str, cost: float
) -> PlayerEconomyState:
    """Pay *cost* and add one unit of *upgrade_id*.

    Both changes land in the returned state or, on InsufficientFunds,
    neither does.
    """
    paid = spend(state, cost)
    return paid.with_count(upgrade_id, paid.count(upgrade_id) + 1)
