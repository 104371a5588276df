from __future__ import annotations

from dataclasses import dataclass, field

from clickerengine.cost_scaling import CostScaling


@dataclass
class UpgradeDef:
    """Static definition of a purchasable upgrade."""

    id: str
    display_name: str = ""
    description: str = ""
    cpc_bonus: float = 0.0
    cps_bonus: float = 0.0
    base_cost: float = 0.0
    cost_scaling: CostScaling = field(default_factory=CostScaling.fixed)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.id


@dataclass
class UpgradeCatalog:
    """Read-only list of upgrades offered to players."""

    upgrades: list[UpgradeDef] = field(default_factory=list)

    _by_id: dict[str, UpgradeDef] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_id = {u.id: u for u in self.upgrades}

    def __iter__(self):
        return iter(self.upgrades)

    def __len__(self) -> int:
        return len(self.upgrades)

    def __contains__(self, upgrade_id: object) -> bool:
        return upgrade_id in self._by_id

    def get(self, upgrade_id: str) -> UpgradeDef | None:
        return self._by_id.get(upgrade_id)

    def cost_of(self, upgrade_id: str, owned: int) -> float | None:
        """Price of the next unit of *upgrade_id*, or None if unknown."""
        udef = self._by_id.get(upgrade_id)
        if udef is None:
            return None
        return udef.cost_scaling.compute(udef.base_cost, owned)

    def validate(self) -> list[str]:
        """Check for common catalog errors. Returns list of error messages."""
        errors: list[str] = []
        seen: set[str] = set()
        for u in self.upgrades:
            if u.id in seen:
                errors.append(f"Duplicate upgrade ID: {u.id!r}")
            seen.add(u.id)
            if u.cpc_bonus < 0:
                errors.append(f"Upgrade {u.id!r} has negative cpc_bonus {u.cpc_bonus!r}")
            if u.cps_bonus < 0:
                errors.append(f"Upgrade {u.id!r} has negative cps_bonus {u.cps_bonus!r}")
            if u.base_cost <= 0:
                errors.append(f"Upgrade {u.id!r} must have a positive base_cost, got {u.base_cost!r}")
        return errors
