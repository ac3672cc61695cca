"""Bunwork CLI — serve an app or list its routes.

Entry point registered as ``bunwork`` in ``pyproject.toml``::

    [project.scripts]
    bunwork = "bunwork.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``bunwork`` command."""
    parser = argparse.ArgumentParser(
        prog="bunwork",
        description="Bunwork — a minimal HTTP request dispatcher.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level for bunwork loggers",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- bunwork run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an app")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- bunwork routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        from bunwork.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from bunwork.cli._routes import run_routes

        run_routes(args)
