"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.query import QueryParams

if TYPE_CHECKING:
    from perch.http.forms import FormData


class BodyTooLarge(ValueError):
    """Raised by ``Request.body()`` when the body exceeds the given limit."""


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.form()``.

    This is what ``create``, ``update`` and ``act`` capabilities receive
    as their "full request" argument.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query:
            return f"{self.path}?{self.query.text}"
        return self.path

    # -- Async body access --

    async def body(self, *, limit: int | None = None) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then the
        same bytes are returned on subsequent calls.

        Raises:
            BodyTooLarge: If *limit* is given and the body (declared or
                actual) is longer than *limit* bytes.
        """
        if "_body" in self._cache:
            cached: bytes = self._cache["_body"]
            if limit is not None and len(cached) > limit:
                raise BodyTooLarge("request body too large")
            return cached

        declared = self.content_length
        if limit is not None and declared is not None and declared > limit:
            raise BodyTooLarge("request body too large")

        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if limit is not None and size > limit:
                raise BodyTooLarge("request body too large")
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def form(self, *, max_size: int | None = None) -> FormData:
        """Parse the query string and form body into one ``FormData``.

        Result is cached — parsed once, then the same ``FormData`` is
        returned on subsequent calls.

        Raises:
            FormParseError: If the query or body is malformed, or the
                body is larger than *max_size*.
            ConfigurationError: If multipart is needed but
                ``python-multipart`` is not installed.
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        from perch.http.forms import parse_form

        result = await parse_form(self, max_size=max_size)
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
