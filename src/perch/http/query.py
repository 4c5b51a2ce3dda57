"""The request query string.

A ``QueryParams`` keeps the query exactly as received. Nothing is parsed
when a ``Request`` is built, so a malformed query never prevents one from
existing. ``fields()`` parses on first use with the same strict rules as
form bodies and raises ``FormParseError`` on bad input.
"""

from perch.http.forms import FormData, FormParseError, parse_urlencoded


class QueryParams:
    """Raw query string with lazy, strict field parsing.

    Usage::

        if request.query:
            tags = request.query.fields().get_list("tag")
    """

    _raw: bytes
    _fields: FormData | None

    __slots__ = ("_fields", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_fields", None)

    @property
    def raw(self) -> bytes:
        """The query string exactly as received (without the ``?``)."""
        return self._raw

    @property
    def text(self) -> str:
        """The raw query as text, for echoing into a URL."""
        return self._raw.decode("latin-1")

    def fields(self) -> FormData:
        """Parse the query into ``FormData``, caching the result.

        Raises:
            FormParseError: On ``;`` separators, bad percent escapes, or
                bytes that are not UTF-8.
        """
        if self._fields is None:
            try:
                text = self._raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = "invalid UTF-8 in query string"
                raise FormParseError(msg) from exc
            object.__setattr__(self, "_fields", FormData(parse_urlencoded(text)))
        return self._fields

    def __bool__(self) -> bool:
        return bool(self._raw)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"
