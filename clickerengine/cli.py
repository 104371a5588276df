from __future__ import annotations

import argparse
import importlib
import logging
import sys
from datetime import timedelta

from clickerengine.boost import Boost, BoostKind
from clickerengine.catalog import UpgradeCatalog
from clickerengine.config import EngineConfig
from clickerengine.formatting import format_text_report
from clickerengine.simulation import Simulation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clickerengine",
        description="clickerengine: cookie economy simulation CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    sim = sub.add_parser("simulate", help="Run a headless playthrough")
    sim.add_argument("catalog_module", help="Python module with define_catalog()")
    sim.add_argument(
        "--duration", type=float, default=600, help="Simulated seconds (default: 600)"
    )
    sim.add_argument(
        "--clicks-per-second", type=float, default=5.0, help="Click rate (default: 5)"
    )
    sim.add_argument(
        "--tick-resolution", type=float, default=1.0, help="Seconds per tick"
    )
    sim.add_argument(
        "--boost",
        action="append",
        default=[],
        metavar="KIND:FACTOR:SECONDS",
        help="Add a global boost, e.g. click_multiplier:2:300 (repeatable)",
    )
    sim.add_argument("--export-json", default=None, help="JSON export path")

    return parser


def load_catalog(module_path: str) -> UpgradeCatalog:
    """Import module and call define_catalog()."""
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_catalog"):
        print(f"Error: module {module_path!r} has no define_catalog() function")
        sys.exit(1)
    return mod.define_catalog()


def parse_boost(text: str, index: int, sim: Simulation) -> Boost:
    """Parse KIND:FACTOR:SECONDS relative to the simulation start."""
    parts = text.split(":")
    if len(parts) != 3:
        raise ValueError(f"Boost must be KIND:FACTOR:SECONDS, got {text!r}")
    kind, factor, seconds = parts
    return Boost(
        id=f"cli-{index}",
        kind=BoostKind(kind),
        factor=float(factor),
        expires_at=sim.clock.start + timedelta(seconds=float(seconds)),
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "simulate":
        catalog = load_catalog(args.catalog_module)
        config = EngineConfig(name=args.catalog_module.rsplit(".", 1)[-1])

        sim = Simulation(
            catalog=catalog,
            duration=args.duration,
            clicks_per_second=args.clicks_per_second,
            tick_resolution=args.tick_resolution,
            config=config,
        )
        try:
            for i, text in enumerate(args.boost):
                sim.backend.boosts.append(parse_boost(text, i, sim))
        except ValueError as exc:
            parser.error(str(exc))

        report = sim.run()
        print(format_text_report(report))

        if args.export_json:
            from clickerengine.export import export_json
            export_json(report, args.export_json)
            print(f"\nJSON exported to {args.export_json}")
