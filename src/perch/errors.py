"""Perch exception hierarchy.

Shared across Registry, Dispatcher, App, and the ASGI handler so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app or registry setup is invalid.

    Typically raised by ``Registry.register()`` at startup: duplicate
    resource names, empty names, or names containing ``/``.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Capability callbacks may raise these instead of writing an error
    response themselves. The ASGI handler catches them and answers with
    the status, detail, and headers carried here.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — the requested item does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
