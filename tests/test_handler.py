"""Tests for the ASGI request handler, error mapping, and response sending."""

import logging
from typing import Any

import pytest

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.http.writer import ResponseWriter
from perch.routing.capabilities import Capabilities
from perch.routing.dispatcher import Dispatcher
from perch.routing.registry import Registry
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.handler import handle_request
from perch.server.sender import body_allowed, encode_headers, send_response


def _make_scope(method: str = "GET", path: str = "/") -> dict[str, Any]:
    return {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
    }


async def _receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def status(self) -> int:
        return self.messages[0]["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.messages[0]["headers"])

    @property
    def body(self) -> bytes:
        return self.messages[1]["body"]


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        send = _Recorder()
        await send_response(Response("hello").with_header("X-Id", "1"), send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"text/plain; charset=utf-8"
        assert send.headers[b"x-id"] == b"1"
        assert send.headers[b"content-length"] == b"5"
        assert send.body == b"hello"

    @pytest.mark.parametrize("status", [204, 304, 101])
    async def test_bodiless_statuses(self, status: int) -> None:
        send = _Recorder()
        await send_response(Response("204 No Content", status=status), send)
        assert send.body == b""
        assert send.headers[b"content-length"] == b"0"

    async def test_body_message_is_final(self) -> None:
        send = _Recorder()
        await send_response(Response("hi"), send)
        assert send.messages[1]["more_body"] is False

    async def test_writer_content_length_not_duplicated(self) -> None:
        w = ResponseWriter()
        w.headers["Content-Length"] = "999"
        w.write("abc")
        send = _Recorder()
        await send_response(w.to_response(), send)
        names = [name for name, _ in send.messages[0]["headers"]]
        assert names.count(b"content-length") == 1
        assert send.headers[b"content-length"] == b"3"

    def test_explicit_content_type_header_wins(self) -> None:
        response = Response("{}").with_header("Content-Type", "application/json")
        raw = encode_headers(response, b"{}")
        assert [name for name, _ in raw].count(b"content-type") == 1
        assert raw[0] == (b"content-type", b"application/json")

    @pytest.mark.parametrize(
        ("status", "allowed"), [(100, False), (200, True), (204, False), (304, False), (404, True)]
    )
    def test_body_allowed(self, status: int, allowed: bool) -> None:
        assert body_allowed(status) is allowed


class TestErrorMapping:
    def _request(self) -> Request:
        return Request.from_asgi(_make_scope(path="/snips/1"), _receive)

    def test_http_error(self) -> None:
        exc = HTTPError(status=409, detail="conflict", headers=(("Retry-After", "5"),))
        response = handle_http_error(exc, self._request())
        assert response.status == 409
        assert response.text == "conflict"
        assert response.header("retry-after") == "5"

    def test_http_error_without_detail(self) -> None:
        response = handle_http_error(HTTPError(status=418), self._request())
        assert response.text == "Error 418"

    def test_internal_error_hides_details(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="perch.server"):
            response = handle_internal_error(
                ValueError("secret"), self._request(), debug=False
            )
        assert response.status == 500
        assert "secret" not in response.text
        assert "500 GET /snips/1" in caplog.text

    def test_internal_error_debug(self) -> None:
        response = handle_internal_error(ValueError("secret"), self._request(), debug=True)
        assert "ValueError: secret" in response.text


class TestHandleRequest:
    async def test_dispatches(self) -> None:
        registry = Registry()
        registry.register("snips", Capabilities(find=lambda w, id: f"snip {id}"))
        send = _Recorder()
        await handle_request(
            _make_scope(path="/snips/3"),
            _receive,
            send,
            dispatcher=Dispatcher(registry),
            debug=False,
        )
        assert send.status == 200
        assert send.body == b"snip 3"

    async def test_delete_204_has_no_body(self) -> None:
        from perch.http.writer import no_content

        registry = Registry()
        registry.register("snips", Capabilities(delete=lambda w, id: no_content(w)))
        send = _Recorder()
        await handle_request(
            _make_scope("DELETE", "/snips/3"),
            _receive,
            send,
            dispatcher=Dispatcher(registry),
            debug=False,
        )
        assert send.status == 204
        assert send.body == b""

    async def test_bad_return_value_is_500(self) -> None:
        registry = Registry()
        registry.register("snips", Capabilities(find=lambda w, id: object()))
        send = _Recorder()
        await handle_request(
            _make_scope(path="/snips/3"),
            _receive,
            send,
            dispatcher=Dispatcher(registry),
            debug=False,
        )
        assert send.status == 500
