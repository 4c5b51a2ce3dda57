"""Response writer and the fixed-vocabulary response helpers.

Every capability callback receives a ``ResponseWriter`` as its first
argument. The writer collects a status, headers, and body; the dispatcher
turns it into an immutable ``Response`` once the callback returns.

The helpers are the only way the dispatcher itself writes responses::

    not_found(w)            # 404 "404 Not Found"
    not_implemented(w)      # 501 "501 Not Implemented"
    created(w, "/snips/3")  # 201 "201 Created" + Location
    updated(w, "/snips/3")  # 200 "200 OK" + Location
    bad_request(w, "why")   # 400 "why"
    no_content(w)           # 204 "204 No Content"
"""

import logging

from perch.http.headers import MutableHeaders
from perch.http.response import PLAIN_TEXT, Response

logger = logging.getLogger("perch.server")


class ResponseWriter:
    """A mutable response under construction.

    The first ``write_header()`` fixes the status; later calls are
    ignored. ``write()`` without a prior ``write_header()`` implies 200.
    Nothing is sent until the callback returns, so header changes made
    after the status still reach the client.
    """

    __slots__ = ("_body", "_status", "headers")

    def __init__(self) -> None:
        self.headers: MutableHeaders = MutableHeaders()
        self._status: int | None = None
        self._body = bytearray()

    @property
    def status(self) -> int:
        """The status written so far (200 if none was written)."""
        return self._status if self._status is not None else 200

    @property
    def written(self) -> bool:
        """True once a status or any body bytes have been written."""
        return self._status is not None or bool(self._body)

    @property
    def body(self) -> bytes:
        """The body bytes written so far."""
        return bytes(self._body)

    def write_header(self, status: int) -> None:
        """Set the response status. Only the first call counts."""
        if self._status is not None:
            logger.warning(
                "superfluous write_header(%d): status already %d", status, self._status
            )
            return
        self._status = status

    def write(self, data: str | bytes) -> int:
        """Append *data* to the body, returning the number of bytes written."""
        if self._status is None:
            self._status = 200
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        self._body.extend(chunk)
        return len(chunk)

    def to_response(self) -> Response:
        """Freeze the writer's state into a ``Response``."""
        content_type = self.headers.get("content-type") or PLAIN_TEXT
        headers = tuple(
            (name, value)
            for name, value in self.headers.pairs()
            if name.lower() != "content-type"
        )
        return Response(
            body=bytes(self._body),
            status=self.status,
            content_type=content_type,
            headers=headers,
        )


# -- Helpers --


def error(w: ResponseWriter, text: str, status: int) -> None:
    """Reply with a plain-text *text* body and *status*."""
    w.headers["Content-Type"] = PLAIN_TEXT
    w.write_header(status)
    w.write(text)


def not_found(w: ResponseWriter) -> None:
    """Emit a 404 Not Found."""
    error(w, "404 Not Found", 404)


def not_implemented(w: ResponseWriter) -> None:
    """Emit a 501 Not Implemented."""
    error(w, "501 Not Implemented", 501)


def created(w: ResponseWriter, location: str) -> None:
    """Emit a 201 Created pointing at the new item's *location*."""
    w.headers["Location"] = location
    error(w, "201 Created", 201)


def updated(w: ResponseWriter, location: str) -> None:
    """Emit a 200 OK with a *location*. Used after a PUT."""
    w.headers["Location"] = location
    error(w, "200 OK", 200)


def bad_request(w: ResponseWriter, instructions: str) -> None:
    """Emit a 400 Bad Request whose body is *instructions*."""
    w.write_header(400)
    w.write(instructions)


def no_content(w: ResponseWriter) -> None:
    """Emit a 204 No Content.

    The body is recorded on the writer but never sent: the ASGI sender
    drops bodies for 204 responses.
    """
    error(w, "204 No Content", 204)


def moved_permanently(w: ResponseWriter, location: str) -> None:
    """Emit a 301 redirect to *location*."""
    w.headers["Location"] = location
    error(w, "301 Moved Permanently", 301)
