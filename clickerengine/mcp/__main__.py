"""Run the playtest server over stdio: python -m clickerengine.mcp <catalog_module>"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys

from clickerengine.config import EngineConfig


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="python -m clickerengine.mcp",
        description="Serve a live cookie session to an MCP client over stdio",
    )
    parser.add_argument("catalog_module", help="Python module with define_catalog()")
    parser.add_argument("--name", default=None, help="Display name for the game")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)

    # stdout carries the protocol; everything else goes to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from clickerengine.cli import load_catalog

    with contextlib.redirect_stdout(sys.stderr):
        catalog = load_catalog(args.catalog_module)

    config = EngineConfig(name=args.name) if args.name else None

    from clickerengine.mcp.server import create_server

    create_server(catalog, config).run(transport="stdio")


if __name__ == "__main__":
    main()
