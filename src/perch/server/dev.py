"""Development server: one pounce worker with reload always on."""

from __future__ import annotations

from typing import TYPE_CHECKING

from perch.server.launch import serve

if TYPE_CHECKING:
    from perch.app import App


def run_dev_server(
    app: App,
    host: str,
    port: int,
    *,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Serve *app* on a single reloading worker.

    When *app_path* (``"module:attribute"``) is given, pounce reimports
    the app after each change on disk. Without it the live object keeps
    serving and only a restart picks up edits.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    serve(
        app,
        "dev",
        {
            "host": host,
            "port": port,
            "workers": 1,
            "reload": True,
            "reload_include": reload_include,
            "reload_dirs": reload_dirs,
        },
        app_path=app_path,
    )
