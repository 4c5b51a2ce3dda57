"""Shared pounce startup for the dev and production runners.

pounce is an optional dependency (``pip install perch[server]``). It is
imported only when a server actually starts, so routing, the test
client and ``perch routes`` work without it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from perch.errors import ConfigurationError

if TYPE_CHECKING:
    from perch.app import App

logger = logging.getLogger("perch.server")


def load_pounce() -> tuple[type, type]:
    """Return pounce's ``(ServerConfig, Server)`` classes.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "Serving requires the 'pounce' package. "
            "Install it with: pip install perch[server]"
        )
        raise ConfigurationError(msg) from None
    return ServerConfig, Server


def announce(app: App, host: str, port: int, mode: str) -> None:
    """Log the resource prefixes *app* is about to serve."""
    prefixes = app.registry.prefixes
    if not prefixes:
        logger.warning("no resources registered; every request will be a 404")
        return
    base = f"http://{host}:{port}"
    for prefix in prefixes:
        logger.info("serving %s%s (%s)", base, prefix, mode)


def serve(app: App, mode: str, config_kwargs: dict[str, Any], **server_kwargs: Any) -> None:
    """Build a pounce server for *app* and block until it exits."""
    ServerConfig, Server = load_pounce()
    config = ServerConfig(**config_kwargs)
    announce(app, config_kwargs["host"], config_kwargs["port"], mode)
    Server(config, app, **server_kwargs).run()
