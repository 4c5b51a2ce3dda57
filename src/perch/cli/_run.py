"""``perch run`` — development or production server command."""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Start the perch server (dev or production mode).

    Resolves ``args.app`` to a perch App, then delegates to either:
    - ``run_dev_server()`` when ``config.debug`` is set
    - ``run_production_server()`` otherwise, or with ``--production``

    CLI flags override app config. A missing server dependency is
    reported like a bad import string.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()

    host = args.host or app.config.host
    port = args.port or app.config.port

    try:
        if args.production or not app.config.debug:
            from perch.server.production import run_production_server

            run_production_server(
                app,
                host=host,
                port=port,
                workers=args.workers if args.workers is not None else app.config.workers,
                log_format=app.config.log_format,
                log_level=app.config.log_level,
                max_connections=app.config.max_connections,
                keep_alive_timeout=app.config.keep_alive_timeout,
                request_timeout=app.config.request_timeout,
            )
        else:
            from perch.server.dev import run_dev_server

            run_dev_server(
                app,
                host,
                port,
                reload_include=app.config.reload_include,
                reload_dirs=app.config.reload_dirs,
                app_path=args.app,
            )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
