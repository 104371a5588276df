from __future__ import annotations

import json
from pathlib import Path

from clickerengine.simulation import SimulationReport


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export a simulation report as JSON."""
    data = {
        "catalog": report.catalog_name,
        "duration": report.duration,
        "clicks_per_second": report.clicks_per_second,
        "clicks": report.clicks,
        "click_income": report.click_income,
        "passive_income": report.passive_income,
        "final_balance": report.final_balance,
        "final_cpc": report.final_cpc,
        "final_cps": report.final_cps,
        "purchases_per_minute": report.purchases_per_minute,
        "upgrade_counts": report.upgrade_counts,
        "purchases": [
            {
                "time": p.time,
                "upgrade_id": p.upgrade_id,
                "cost": p.cost,
                "balance_after": p.balance_after,
            }
            for p in report.purchases
        ],
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
