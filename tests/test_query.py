"""Tests for perch.http.query — raw query string with strict fields()."""

import pytest

from perch.http.forms import FormParseError
from perch.http.query import QueryParams


class TestQueryParams:
    def test_raw_kept_verbatim(self) -> None:
        assert QueryParams(b"x=%zz").raw == b"x=%zz"

    def test_malformed_query_builds(self) -> None:
        q = QueryParams(b"x=%zz")
        assert q
        assert q.text == "x=%zz"

    def test_empty_is_falsy(self) -> None:
        assert not QueryParams()
        assert not QueryParams(b"")

    def test_fields_repeated_and_blank(self) -> None:
        fields = QueryParams(b"a=1&a=2&b=").fields()
        assert fields.get_list("a") == ["1", "2"]
        assert fields["b"] == ""

    def test_fields_cached(self) -> None:
        q = QueryParams(b"a=1")
        assert q.fields() is q.fields()

    def test_fields_decode_utf8(self) -> None:
        fields = QueryParams(b"name=caf%C3%A9&city=K%C3%B6ln").fields()
        assert fields["name"] == "café"
        assert fields["city"] == "Köln"

    def test_fields_raw_utf8_bytes(self) -> None:
        assert QueryParams("q=é".encode()).fields()["q"] == "é"

    def test_fields_reject_bad_escape(self) -> None:
        with pytest.raises(FormParseError, match="invalid URL escape"):
            QueryParams(b"x=%zz").fields()

    def test_fields_reject_semicolon(self) -> None:
        with pytest.raises(FormParseError, match="semicolon"):
            QueryParams(b"a=1;b=2").fields()

    def test_fields_reject_non_utf8(self) -> None:
        with pytest.raises(FormParseError, match="invalid UTF-8 in query string"):
            QueryParams(b"q=\xff").fields()
