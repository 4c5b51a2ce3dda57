"""Form parsing — query string plus URL-encoded or multipart bodies.

Informed capabilities (``informed_index``, ``informed_find``) receive the
request's parsed form. The form merges two sources:

- the query string, always;
- the body, when the method carries one (POST, PUT, PATCH) and the
  content type is ``application/x-www-form-urlencoded`` or
  ``multipart/form-data``.

Body values come first for each key, then query values. Parsing is
strict: bad percent escapes, ``;`` separators, undecodable UTF-8, and
oversized bodies raise ``FormParseError``, which the dispatcher turns
into a 400.

URL-encoded forms use stdlib ``urllib.parse``. ``python-multipart`` is an
optional dependency (``pip install perch[forms]``).
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote_plus

if TYPE_CHECKING:
    from perch.http.request import Request

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class FormParseError(ValueError):
    """Raised when a request's form data cannot be parsed.

    The message is sent back verbatim as the body of the 400 response.
    """


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file part from a multipart body, held in memory."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    async def read(self) -> bytes:
        """Return the file content as bytes."""
        return self._content

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    Implements ``Mapping[str, str]`` and the ``MultiValueMapping`` protocol.
    ``files`` holds multipart file parts by field name.

    Usage::

        def informed_index(self, w, form, headers):
            limit = int(form.get("limit", "20"))
            tags = form.get_list("tag")
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        object.__setattr__(self, "_data", data or {})
        object.__setattr__(self, "_files", files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (repeated fields, multi-selects)."""
        return list(self._data.get(key, []))

    def merged_with(self, other: FormData) -> FormData:
        """Return a new FormData with *other*'s values appended after ours."""
        data = {key: list(values) for key, values in self._data.items()}
        for key, values in other._data.items():
            data.setdefault(key, []).extend(values)
        return FormData(data, {**other._files, **self._files})


def parse_urlencoded(text: str) -> dict[str, list[str]]:
    """Strictly parse ``a=1&b=2`` text into a field → values dict.

    Blank values are kept. Fields without ``=`` get an empty value.

    Raises:
        FormParseError: On ``;`` separators, invalid percent escapes,
            or escapes that do not decode as UTF-8.
    """
    data: dict[str, list[str]] = {}
    for pair in text.split("&"):
        if not pair:
            continue
        if ";" in pair:
            msg = "invalid semicolon separator in query"
            raise FormParseError(msg)
        key, _, value = pair.partition("=")
        data.setdefault(_unescape(key), []).append(_unescape(value))
    return data


def _unescape(text: str) -> str:
    bad = _BAD_ESCAPE.search(text)
    if bad is not None:
        escape = text[bad.start() : bad.start() + 3]
        msg = f"invalid URL escape {escape!r}"
        raise FormParseError(msg)
    try:
        return unquote_plus(text, errors="strict")
    except UnicodeDecodeError as exc:
        msg = f"invalid UTF-8 in form field {text!r}"
        raise FormParseError(msg) from exc


def media_type(content_type: str | None) -> str:
    """Return the lowercased media type of a Content-Type header value."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


async def parse_form(request: Request, *, max_size: int | None = None) -> FormData:
    """Parse the query string and any form body of *request*.

    Args:
        request: The incoming request.
        max_size: Upper bound on the body size in bytes; ``None`` for
            no limit.

    Raises:
        FormParseError: If either source is malformed or the body is
            larger than *max_size*.
        ConfigurationError: If the body is multipart and
            ``python-multipart`` is not installed.
    """
    query = request.query.fields()

    if request.method not in _BODY_METHODS:
        return query

    kind = media_type(request.content_type)
    if kind not in (URLENCODED, MULTIPART):
        return query

    from perch.http.request import BodyTooLarge

    try:
        raw = await request.body(limit=max_size)
    except BodyTooLarge as exc:
        raise FormParseError(str(exc)) from exc

    if kind == URLENCODED:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "invalid UTF-8 in form body"
            raise FormParseError(msg) from exc
        body = FormData(parse_urlencoded(text))
    else:
        body = _parse_multipart(raw, request.content_type or "")

    return body.merged_with(query)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    """Parse a multipart body using python-multipart.

    Raises ``ConfigurationError`` if ``python-multipart`` is not installed.
    """
    from perch.errors import ConfigurationError

    try:
        from python_multipart.exceptions import FormParserError
        from python_multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install perch[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "no multipart boundary param in Content-Type"
        raise FormParseError(msg)

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    # Per-part state, reset on each part
    headers: dict[str, str] = {}
    header_field = ""
    content = bytearray()

    def on_part_begin() -> None:
        nonlocal header_field, content
        headers.clear()
        header_field = ""
        content = bytearray()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        content.extend(chunk[start:end])

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        nonlocal header_field
        header_field = chunk[start:end].decode("latin-1").lower()

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        headers[header_field] = chunk[start:end].decode("latin-1")

    def on_part_end() -> None:
        _, params = parse_options_header(
            headers.get("content-disposition", "").encode("latin-1")
        )
        name = params.get(b"name")
        if name is None:
            return
        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is not None:
            files[field] = UploadFile(
                filename=filename.decode("utf-8"),
                content_type=headers.get("content-type", "application/octet-stream"),
                size=len(content),
                _content=bytes(content),
            )
            return
        try:
            value = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"invalid UTF-8 in multipart field {field!r}"
            raise FormParseError(msg) from exc
        data.setdefault(field, []).append(value)

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
    }

    parser = MultipartParser(boundary, callbacks)
    try:
        parser.write(body)
        parser.finalize()
    except FormParserError as exc:
        raise FormParseError(f"malformed multipart body: {exc}") from exc

    return FormData(data, files)
