"""Cookie example catalog: the classic building ladder."""
from __future__ import annotations

from clickerengine.catalog import UpgradeCatalog, UpgradeDef
from clickerengine.cost_scaling import CostScaling
from clickerengine.shop import MembershipGrant, ShopItem, VipGrant


def define_catalog() -> UpgradeCatalog:
    return UpgradeCatalog(
        upgrades=[
            UpgradeDef(
                id="cursor",
                display_name="Cursor",
                description="Clicks a little harder",
                cpc_bonus=0.1,
                cps_bonus=0.1,
                base_cost=15,
                cost_scaling=CostScaling.exponential(1.15),
            ),
            UpgradeDef(
                id="reinforced_finger",
                display_name="Reinforced Finger",
                description="+1 cookie per click",
                cpc_bonus=1.0,
                base_cost=100,
                cost_scaling=CostScaling.exponential(1.5),
            ),
            UpgradeDef(
                id="grandma",
                display_name="Grandma",
                description="A nice grandma to bake more cookies",
                cps_bonus=1.0,
                base_cost=100,
                cost_scaling=CostScaling.exponential(1.15),
            ),
            UpgradeDef(
                id="farm",
                display_name="Farm",
                description="Grows cookie plants from cookie seeds",
                cps_bonus=8.0,
                base_cost=1100,
                cost_scaling=CostScaling.exponential(1.15),
            ),
            UpgradeDef(
                id="mine",
                display_name="Mine",
                description="Mines out cookie dough",
                cps_bonus=47.0,
                base_cost=12000,
                cost_scaling=CostScaling.exponential(1.15),
            ),
            UpgradeDef(
                id="factory",
                display_name="Factory",
                description="Produces large quantities of cookies",
                cps_bonus=260.0,
                base_cost=130000,
                cost_scaling=CostScaling.exponential(1.15),
            ),
        ],
    )


def define_shop() -> list[ShopItem]:
    return [
        ShopItem("vip", "VIP Status", VipGrant(), price=4.99,
                 description="Get a shiny VIP badge"),
        ShopItem("bronze_membership", "Bronze Membership", MembershipGrant("bronze"), price=0.99),
        ShopItem("silver_membership", "Silver Membership", MembershipGrant("silver"), price=2.99),
        ShopItem("gold_membership", "Gold Membership", MembershipGrant("gold"), price=9.99),
        ShopItem("diamond_membership", "Diamond Membership", MembershipGrant("diamond"), price=19.99),
    ]


if __name__ == "__main__":
    from clickerengine.formatting import format_text_report
    from clickerengine.simulation import Simulation

    report = Simulation(define_catalog(), duration=1800, clicks_per_second=5).run()
    print(format_text_report(report))
