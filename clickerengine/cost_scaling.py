from __future__ import annotations

import math
from typing import Callable


class CostScaling:
    """Determines how an upgrade's price grows with the number already owned."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, owned: int) -> float:
        """Price of the next unit, rounded up to a whole number of cookies."""
        return float(math.ceil(round(self._fn(base_cost, owned), 6)))

    @classmethod
    def fixed(cls) -> CostScaling:
        """Price never changes."""
        return cls(lambda base, _owned: base)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> CostScaling:
        """Price = base * growth_rate^owned."""
        gr = growth_rate

        def _compute(base: float, owned: int) -> float:
            return base * gr ** owned

        return cls(_compute)

    @classmethod
    def linear(cls, increment_pct: float = 0.10) -> CostScaling:
        """Price = base * (1 + increment_pct * owned)."""
        pct = increment_pct

        def _compute(base: float, owned: int) -> float:
            return base * (1.0 + pct * owned)

        return cls(_compute)

    @classmethod
    def custom(cls, fn: Callable[[float, int], float]) -> CostScaling:
        """Arbitrary price function."""
        return cls(fn)
