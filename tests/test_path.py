"""Tests for request path parsing."""

import pytest

from perch.routing.path import MalformedPath, ResourcePath, parse_resource_path


class TestParseResourcePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/snips/", ResourcePath("snips", "")),
            ("/snips/42", ResourcePath("snips", "42")),
            ("/snips/42/", ResourcePath("snips", "42/")),
            ("/snips/42/publish/now", ResourcePath("snips", "42/publish/now")),
            ("/snips//x", ResourcePath("snips", "/x")),
            ("/snips", ResourcePath("snips", "", bare=True)),
        ],
    )
    def test_shapes(self, path: str, expected: ResourcePath) -> None:
        assert parse_resource_path(path) == expected

    def test_root_is_malformed(self) -> None:
        with pytest.raises(MalformedPath, match="no resource name"):
            parse_resource_path("/")

    def test_empty_name_is_malformed(self) -> None:
        with pytest.raises(MalformedPath):
            parse_resource_path("//42")

    def test_relative_is_malformed(self) -> None:
        with pytest.raises(MalformedPath, match="does not start with"):
            parse_resource_path("snips/42")


class TestResourcePath:
    def test_collection(self) -> None:
        assert ResourcePath("snips").is_collection
        assert not ResourcePath("snips", "1").is_collection

    def test_tail(self) -> None:
        assert ResourcePath("snips", "42/publish").tail == ["42", "publish"]
        assert ResourcePath("snips", "/x").tail == ["", "x"]
        assert ResourcePath("snips", "42").tail == ["42"]
