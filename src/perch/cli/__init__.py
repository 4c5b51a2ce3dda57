"""Perch CLI — run an app under the pounce ASGI server.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — minimal REST resource routing for ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start dev or production server")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--production",
        action="store_true",
        help="Run in production mode (multi-worker, no reload)",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect, production only)",
    )

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered resources")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from perch.cli._routes import print_routes

        print_routes(args)
