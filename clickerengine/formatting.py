from __future__ import annotations

import math

from clickerengine.simulation import SimulationReport

_SUFFIXES = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))


def format_number(value: float) -> str:
    """Abbreviate large cookie counts: 1234 -> '1.2K', 999 -> '999'."""
    for threshold, suffix in _SUFFIXES:
        if value >= threshold:
            return f"{value / threshold:.1f}{suffix}"
    return f"{math.floor(value):,}"


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + f" {report.catalog_name} Simulation " + "=" * 30)
    lines.append(f"Duration: {report.duration:.0f}s at {report.clicks_per_second:g} clicks/s")
    lines.append(f"Final balance: {format_number(report.final_balance)}")
    lines.append(f"Final rates: {report.final_cpc} per click, {report.final_cps} per second")
    lines.append("")

    lines.append("INCOME:")
    lines.append(f"  Clicks: {report.clicks} for {format_number(report.click_income)}")
    lines.append(f"  Passive: {format_number(report.passive_income)}")
    lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    if report.upgrade_counts:
        for upgrade_id, count in sorted(report.upgrade_counts.items()):
            lines.append(f"  {upgrade_id:.<30s} {count}")

    return "\n".join(lines)
