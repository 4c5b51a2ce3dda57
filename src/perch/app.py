"""Perch application class.

Mutable during setup (resource registration, lifecycle hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import threading
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import Hook
from perch.config import AppConfig
from perch.routing.dispatcher import Dispatcher
from perch.routing.registry import Registry, ResourceEntry
from perch.server.handler import handle_request


class App:
    """The perch application — an ASGI 3 callable over a resource registry.

    Usage::

        app = App()
        app.resource("snips", SnipsCollection())

        @app.resource("notes")
        class Notes:
            def index(self, w):
                w.write("no notes yet")

        app.run()

    The registry can be passed in, which lets several apps (or tests)
    keep isolated resource sets::

        registry = Registry()
        registry.register("snips", SnipsCollection())
        app = App(registry=registry)

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread builds the dispatcher, even
        when several ASGI workers take their first request at once.
    """

    __slots__ = (
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_registry",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None, *, registry: Registry | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registry: Registry = registry if registry is not None else Registry()
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._dispatcher: Dispatcher | None = None

    # -- Resource registration --

    def resource(self, name: str, resource: Any = None) -> Any:
        """Register a resource under ``/<name>/``.

        Called with a resource value, registers it and returns its
        ``ResourceEntry``. Called with only a name, returns a class
        decorator that registers an instance of the decorated class
        (constructed with no arguments) and returns the class unchanged.

        Raises:
            ConfigurationError: On a duplicate or invalid name, or a
                resource whose callbacks have the wrong signatures.
            RuntimeError: If the app has started serving.
        """
        if resource is None:

            def decorator(cls: type) -> type:
                self.resource(name, cls())
                return cls

            return decorator

        self._check_not_frozen()
        entry: ResourceEntry = self._registry.register(name, resource)
        return entry

    @property
    def registry(self) -> Registry:
        """The registry this app dispatches against."""
        return self._registry

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        after the server stops accepting new requests.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server (dev or production based on config.debug).

        Freezes the app and starts serving requests.

        - **Development mode** (debug=True): single worker with auto-reload
        - **Production mode** (debug=False): multi-worker
        """
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.debug:
            from perch.server.dev import run_dev_server

            run_dev_server(
                self,
                _host,
                _port,
                reload_include=self.config.reload_include,
                reload_dirs=self.config.reload_dirs,
            )
        else:
            from perch.server.production import run_production_server

            run_production_server(
                self,
                host=_host,
                port=_port,
                workers=self.config.workers,
                log_format=self.config.log_format,
                log_level=self.config.log_level,
                max_connections=self.config.max_connections,
                keep_alive_timeout=self.config.keep_alive_timeout,
                request_timeout=self.config.request_timeout,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes
        to the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._dispatcher is not None

        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self._dispatcher,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Freeze the registry and build the dispatcher.

        MUST only be called while holding _freeze_lock.
        """
        self._registry.freeze()
        self._dispatcher = Dispatcher(self._registry, max_form_size=self.config.max_form_size)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register resources and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
