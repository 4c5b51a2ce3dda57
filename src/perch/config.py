"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".toml")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Limits
    max_form_size: int = 10 * 1024 * 1024  # 10 MB, form bodies for informed capabilities

    # Production
    workers: int = 0  # 0 = auto-detect from CPU count
    log_format: str = "json"
    log_level: str = "info"
    max_connections: int = 1000
    keep_alive_timeout: float = 5.0
    request_timeout: float = 30.0
