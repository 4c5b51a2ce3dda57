"""Production server — multi-worker pounce without reload."""

from __future__ import annotations

from typing import TYPE_CHECKING

from perch.server.launch import serve

if TYPE_CHECKING:
    from perch.app import App


def run_production_server(
    app: App,
    host: str = "0.0.0.0",
    port: int = 8000,
    workers: int = 0,  # 0 = auto-detect from CPU count
    *,
    log_format: str = "json",
    log_level: str = "info",
    max_connections: int = 1000,
    keep_alive_timeout: float = 5.0,
    request_timeout: float = 30.0,
) -> None:
    """Run a perch app under pounce in production mode.

    Args:
        app: Perch App instance.
        host: Bind address (default: 0.0.0.0 for all interfaces).
        port: Bind port.
        workers: Worker count; 0 lets pounce pick from the CPU count.
        log_format: Pounce access/lifecycle log format (``"json"`` or
            ``"text"``).
        log_level: Minimum log level for pounce and perch loggers.
        max_connections: Concurrent connection cap.
        keep_alive_timeout: Idle keep-alive timeout in seconds.
        request_timeout: Per-request timeout in seconds.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    serve(
        app,
        "production",
        {
            "host": host,
            "port": port,
            "workers": workers,
            "log_format": log_format,
            "log_level": log_level,
            "max_connections": max_connections,
            "keep_alive_timeout": keep_alive_timeout,
            "request_timeout": request_timeout,
        },
    )
