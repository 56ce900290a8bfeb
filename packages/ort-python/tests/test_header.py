"""Tests for ORT header lines."""

import logging
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ort import DuplicateFieldError, FieldNode, MalformedHeaderError
from ort.header import format_header, parse_header
from ort.types import ParsedLine


def header(content: str, line_number: int = 1, **kwargs):
    return parse_header(ParsedLine(line_number, content), **kwargs)


class TestHeaderForms:
    """Test recognition of the three header forms."""

    def test_keyed(self):
        section = header("users:id,name:")
        assert section.key == "users"
        assert section.schema == (FieldNode("id"), FieldNode("name"))

    def test_nested(self):
        section = header("users:id,profile(name,age):")
        assert section.schema == (
            FieldNode("id"),
            FieldNode("profile", (FieldNode("name"), FieldNode("age"))),
        )

    def test_keyless(self):
        section = header(":id,name:")
        assert section.key is None
        assert not section.is_literal

    def test_literal(self):
        section = header("colors:")
        assert section.key == "colors"
        assert section.schema == ()
        assert section.is_literal
        assert not section.is_standalone

    def test_spaces_in_field_list(self):
        section = header("users: id , name :")
        assert section.schema == (FieldNode("id"), FieldNode("name"))

    def test_same_name_at_different_levels(self):
        section = header("users:a,p(a):")
        assert section.schema[1].children == (FieldNode("a"),)

    def test_line_number_kept(self):
        assert header("users:id:", line_number=7).line_number == 7


class TestDataLines:
    """Test lines that are not headers."""

    @pytest.mark.parametrize("content", ["1,Alice", "a\\:", "1,2:", "(a:1)", ":", "[x]"])
    def test_not_header(self, content):
        assert header(content) is None


class TestHeaderErrors:
    """Test malformed headers."""

    @pytest.mark.parametrize(
        "content",
        [
            "users::",
            "::",
            "users:id,,name:",
            "users:a(),b:",
            "users:a(b)c:",
            "users:a[b]:",
            "users:id,profile(name:",
            "users:a:b:",
            "users:a),b:",
        ],
    )
    def test_malformed(self, content):
        with pytest.raises(MalformedHeaderError):
            header(content, line_number=3)

    def test_error_location(self):
        with pytest.raises(MalformedHeaderError) as exc_info:
            header("users:a(),b:", line_number=3)
        assert exc_info.value.line_number == 3
        assert exc_info.value.raw == "users:a(),b:"

    def test_duplicate(self):
        with pytest.raises(DuplicateFieldError):
            header("users:id,id:")

    def test_nested_duplicate(self):
        with pytest.raises(DuplicateFieldError):
            header("users:p(a,a):")

    def test_non_identifier_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            section = header("users:user-id:")
        assert section.schema == (FieldNode("user-id"),)
        assert "not an identifier" in caplog.text

    def test_non_identifier_strict(self):
        with pytest.raises(MalformedHeaderError):
            header("users:user-id:", strict=True)


class TestFormatHeader:
    """Test header rendering."""

    def test_keyed(self):
        schema = (FieldNode("id"), FieldNode("profile", (FieldNode("name"), FieldNode("age"))))
        assert format_header("users", schema) == "users:id,profile(name,age):"

    def test_keyless(self):
        assert format_header(None, (FieldNode("id"),)) == ":id:"

    def test_literal(self):
        assert format_header("colors", ()) == "colors:"
