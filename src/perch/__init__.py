"""Perch — minimal REST resource routing for ASGI.

Register named resources; perch maps each request's method and URL shape
to the matching capability on the matching resource.

Basic usage::

    from perch import App, created, not_found

    class Snips:
        def index(self, w):
            w.write("all snips")

        def find(self, w, id):
            if id != "1":
                return not_found(w)
            w.write("snip 1")

        async def create(self, w, request):
            form = await request.form()
            created(w, "/snips/2")

    app = App()
    app.resource("snips", Snips())
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Capabilities",
    "Capability",
    "ConfigurationError",
    "HTTPError",
    "NotFound",
    "PerchError",
    "Registry",
    "Request",
    "Response",
    "ResponseWriter",
    "bad_request",
    "created",
    "no_content",
    "not_found",
    "not_implemented",
    "updated",
]

_WRITER_NAMES = (
    "ResponseWriter",
    "bad_request",
    "created",
    "no_content",
    "not_found",
    "not_implemented",
    "updated",
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Registry":
        from perch.routing.registry import Registry

        return Registry

    if name in ("Capabilities", "Capability"):
        from perch.routing import capabilities as _caps

        return getattr(_caps, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in _WRITER_NAMES:
        from perch.http import writer as _writer

        return getattr(_writer, name)

    if name in ("ConfigurationError", "HTTPError", "NotFound", "PerchError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
