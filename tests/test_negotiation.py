"""Tests for perch.server.negotiation — capability return values."""

import pytest

from perch.http.response import Response
from perch.server.negotiation import JSON, negotiate


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_str(self) -> None:
        result = negotiate("hello")
        assert result.status == 200
        assert result.text == "hello"
        assert result.content_type.startswith("text/plain")

    def test_bytes(self) -> None:
        result = negotiate(b"\x00\x01")
        assert result.content_type == "application/octet-stream"

    def test_dict(self) -> None:
        result = negotiate({"id": 1})
        assert result.content_type == JSON
        assert result.json == {"id": 1}

    def test_list(self) -> None:
        assert negotiate([1, 2]).json == [1, 2]

    def test_status_tuple(self) -> None:
        result = negotiate(({"error": "gone"}, 410))
        assert result.status == 410
        assert result.json == {"error": "gone"}

    def test_status_headers_tuple(self) -> None:
        result = negotiate(("made", 201, {"Location": "/snips/1"}))
        assert result.status == 201
        assert result.header("location") == "/snips/1"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert int"):
            negotiate(42)
