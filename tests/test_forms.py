"""Tests for form parsing — query string, URL-encoded and multipart bodies."""

from typing import Any

import pytest

from perch.http.forms import (
    FormData,
    FormParseError,
    UploadFile,
    media_type,
    parse_form,
    parse_urlencoded,
)
from perch.http.request import Request


def _make_request(
    method: str = "GET",
    *,
    query: bytes = b"",
    content_type: str | None = None,
    body: bytes = b"",
) -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if content_type is not None:
        headers.append((b"content-type", content_type.encode("latin-1")))
    if body:
        headers.append((b"content-length", str(len(body)).encode("latin-1")))

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "path": "/things/",
        "query_string": query,
        "headers": headers,
    }
    return Request.from_asgi(scope, receive)


# ---------------------------------------------------------------------------
# FormData
# ---------------------------------------------------------------------------


class TestFormData:
    def test_getitem_returns_first(self) -> None:
        form = FormData({"color": ["red", "blue"]})
        assert form["color"] == "red"

    def test_getitem_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            FormData({})["missing"]

    def test_get_with_default(self) -> None:
        form = FormData({})
        assert form.get("missing") is None
        assert form.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        form = FormData({"tags": ["a", "b"]})
        assert form.get_list("tags") == ["a", "b"]
        assert form.get_list("missing") == []

    def test_mapping_protocol(self) -> None:
        form = FormData({"a": ["1"], "b": ["2"]})
        assert set(form) == {"a", "b"}
        assert len(form) == 2
        assert "a" in form
        assert "FormData" in repr(form)

    def test_merged_with_appends_other(self) -> None:
        body = FormData({"a": ["body"]})
        query = FormData({"a": ["query"], "b": ["q"]})
        merged = body.merged_with(query)
        assert merged.get_list("a") == ["body", "query"]
        assert merged["b"] == "q"
        assert body.get_list("a") == ["body"]

    def test_files(self) -> None:
        upload = UploadFile(filename="a.txt", content_type="text/plain", size=2, _content=b"hi")
        form = FormData({}, {"doc": upload})
        assert form.files["doc"] is upload
        assert len(FormData({}).files) == 0


class TestUploadFile:
    async def test_read(self) -> None:
        upload = UploadFile(filename="a.txt", content_type="text/plain", size=2, _content=b"hi")
        assert await upload.read() == b"hi"
        assert "a.txt" in repr(upload)


# ---------------------------------------------------------------------------
# parse_urlencoded
# ---------------------------------------------------------------------------


class TestParseUrlencoded:
    def test_simple(self) -> None:
        assert parse_urlencoded("a=1&b=2") == {"a": ["1"], "b": ["2"]}

    def test_repeated(self) -> None:
        assert parse_urlencoded("t=x&t=y") == {"t": ["x", "y"]}

    def test_blank_and_missing_values(self) -> None:
        assert parse_urlencoded("a=&b") == {"a": [""], "b": [""]}

    def test_empty(self) -> None:
        assert parse_urlencoded("") == {}
        assert parse_urlencoded("&&") == {}

    def test_decoding(self) -> None:
        assert parse_urlencoded("q=hello+world&e=%C3%A9") == {"q": ["hello world"], "e": ["é"]}

    def test_semicolon_rejected(self) -> None:
        with pytest.raises(FormParseError, match="invalid semicolon separator in query"):
            parse_urlencoded("a=1;b=2")

    @pytest.mark.parametrize("text", ["a=%zz", "a=%4", "%=1", "a=100%"])
    def test_bad_escape_rejected(self, text: str) -> None:
        with pytest.raises(FormParseError, match="invalid URL escape"):
            parse_urlencoded(text)

    def test_invalid_utf8_rejected(self) -> None:
        with pytest.raises(FormParseError, match="invalid UTF-8"):
            parse_urlencoded("a=%FF")


class TestMediaType:
    def test_strips_params(self) -> None:
        assert media_type("Multipart/Form-Data; boundary=x") == "multipart/form-data"

    def test_missing(self) -> None:
        assert media_type(None) == ""
        assert media_type("") == ""


# ---------------------------------------------------------------------------
# parse_form
# ---------------------------------------------------------------------------


class TestParseForm:
    async def test_query_only_for_get(self) -> None:
        request = _make_request(
            "GET",
            query=b"a=1",
            content_type="application/x-www-form-urlencoded",
            body=b"b=2",
        )
        form = await parse_form(request)
        assert dict(form) == {"a": "1"}

    async def test_urlencoded_body_then_query(self) -> None:
        request = _make_request(
            "POST",
            query=b"a=query",
            content_type="application/x-www-form-urlencoded",
            body=b"a=body&b=2",
        )
        form = await parse_form(request)
        assert form.get_list("a") == ["body", "query"]
        assert form["b"] == "2"

    @pytest.mark.parametrize("method", ["PUT", "PATCH"])
    async def test_other_body_methods(self, method: str) -> None:
        request = _make_request(
            method, content_type="application/x-www-form-urlencoded", body=b"x=1"
        )
        assert (await parse_form(request))["x"] == "1"

    async def test_other_content_type_ignored(self) -> None:
        request = _make_request("POST", content_type="application/json", body=b'{"x": 1}')
        assert len(await parse_form(request)) == 0

    async def test_body_too_large(self) -> None:
        request = _make_request(
            "POST", content_type="application/x-www-form-urlencoded", body=b"a=123456"
        )
        with pytest.raises(FormParseError, match="request body too large"):
            await parse_form(request, max_size=4)

    async def test_malformed_body(self) -> None:
        request = _make_request(
            "POST", content_type="application/x-www-form-urlencoded", body=b"a=%zz"
        )
        with pytest.raises(FormParseError, match="invalid URL escape"):
            await parse_form(request)

    async def test_invalid_utf8_query(self) -> None:
        with pytest.raises(FormParseError, match="invalid UTF-8 in query string"):
            await parse_form(_make_request(query=b"a=\xff"))

    async def test_utf8_query_matches_query_fields(self) -> None:
        request = _make_request(query=b"name=caf%C3%A9")
        form = await parse_form(request)
        assert form["name"] == "café"
        assert form is request.query.fields()

    async def test_request_form_is_cached(self) -> None:
        request = _make_request(query=b"a=1")
        assert await request.form() is await request.form()


class TestMultipart:
    BOUNDARY = "XyZzY"

    def _body(self) -> bytes:
        b = self.BOUNDARY
        return (
            f"--{b}\r\n"
            'Content-Disposition: form-data; name="title"\r\n'
            "\r\n"
            "Hello\r\n"
            f"--{b}\r\n"
            'Content-Disposition: form-data; name="doc"; filename="notes.txt"\r\n'
            "Content-Type: text/plain\r\n"
            "\r\n"
            "file body\r\n"
            f"--{b}--\r\n"
        ).encode()

    async def test_fields_and_files(self) -> None:
        request = _make_request(
            "POST",
            query=b"title=query",
            content_type=f"multipart/form-data; boundary={self.BOUNDARY}",
            body=self._body(),
        )
        form = await parse_form(request)
        assert form.get_list("title") == ["Hello", "query"]
        upload = form.files["doc"]
        assert upload.filename == "notes.txt"
        assert upload.content_type == "text/plain"
        assert upload.size == 9
        assert await upload.read() == b"file body"

    async def test_missing_boundary(self) -> None:
        request = _make_request("POST", content_type="multipart/form-data", body=self._body())
        with pytest.raises(FormParseError, match="no multipart boundary"):
            await parse_form(request)
