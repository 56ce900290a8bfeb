"""Tests for ORT serializer."""

import logging
import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ort import FieldNode, MaxDepthExceededError, SerializeOptions, infer_schema, serialize


class TestPrimitives:
    """Test encoding of root scalar values."""

    def test_integer(self):
        assert serialize(42) == "42"
        assert serialize(-17) == "-17"

    def test_float_keeps_point(self):
        assert serialize(3.0) == "3.0"
        assert serialize(2.5) == "2.5"

    def test_float_without_exponent(self):
        assert serialize(1e-7) == "0.0000001"
        assert serialize(1e20) == "100000000000000000000.0"

    def test_special_floats(self):
        assert serialize([1.0, float("nan"), float("inf")]) == "[1.0,,]"

    def test_booleans(self):
        assert serialize(True) == "true"
        assert serialize(False) == "false"

    def test_plain_string(self):
        assert serialize("hello world") == "hello world"


class TestStringEscaping:
    """Test strings that need escapes to read back unchanged."""

    def test_numeric_lookalikes(self):
        assert serialize("007") == "\\007"
        assert serialize("42") == "\\42"
        assert serialize("-1.5") == "\\-1.5"

    def test_boolean_lookalikes(self):
        assert serialize("true") == "tr\\ue"
        assert serialize("false") == "\\false"

    def test_comment_lookalike(self):
        assert serialize("#tag") == "\\#tag"

    def test_bom_lookalike(self):
        assert serialize("\ufeffx") == "\\\ufeffx"

    def test_structural_characters(self):
        assert serialize("a,b") == "a\\,b"
        assert serialize("(x)") == "\\(x\\)"
        assert serialize("[]") == "\\[\\]"

    def test_colon(self):
        assert serialize("key:") == "key\\:"

    def test_empty_string_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert serialize({"a": ""}) == "(a:)"
        assert "Empty string" in caplog.text


class TestRootForms:
    """Test selection of the document shape."""

    def test_keyed_sections(self):
        data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
        assert serialize(data) == "users:id,name:\n1,Alice\n2,Bob"

    def test_nested_schema(self):
        data = {"users": [{"id": 1, "profile": {"name": "John", "age": 30}}]}
        assert serialize(data) == "users:id,profile(name,age):\n1,(John,30)"

    def test_keyed_with_literal_sections(self):
        data = {"colors": ["red", "green", "blue"], "users": [{"id": 1}], "none": None}
        assert serialize(data) == "colors:\n[red,green,blue]\nusers:id:\n1\nnone:"

    def test_root_object(self):
        assert serialize({"id": 1, "name": "Alice"}) == ":id,name:\n1,Alice"

    def test_root_object_with_array(self):
        assert serialize({"colors": ["red", "green"]}) == ":colors:\n[red,green]"

    def test_root_object_nested(self):
        assert serialize({"p": {"x": None}}) == ":p(x):\n( )"

    def test_root_records(self):
        data = [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]
        assert serialize(data) == ":id,name:\n1,Alice\n2,Bob"

    def test_root_single_record_list(self):
        assert serialize([{"id": 1, "name": "Alice"}]) == "[(id:1,name:Alice)]"

    def test_root_mixed_list(self):
        assert serialize([1, "a", None, [2]]) == "[1,a,,[2]]"

    def test_empty_containers(self):
        assert serialize({}) == ""
        assert serialize([]) == "[]"

    def test_single_null_list(self):
        assert serialize([None]) == "[ ]"

    def test_non_plain_keys(self):
        data = [{"first name": "A"}, {"first name": "B"}]
        assert serialize(data) == "[(first name:A),(first name:B)]"

    def test_non_section_key(self):
        assert serialize({"my key": [{"id": 1}]}) == "(my key:[(id:1)])"


class TestTables:
    """Test record table encoding."""

    def test_null_fields(self):
        data = {"rows": [{"a": 1, "b": None}, {"a": 2, "b": 3}]}
        assert serialize(data) == "rows:a,b:\n1,\n2,3"

    def test_blank_row_falls_back(self):
        data = {"rows": [{"a": None}, {"a": 1}]}
        assert serialize(data) == "rows:\n[(a:),(a:1)]"

    def test_null_nested_object(self):
        data = {"users": [{"id": 1, "p": {"x": 1}}, {"id": 2, "p": None}]}
        assert serialize(data) == "users:id,p(x):\n1,(1)\n2,"

    def test_non_uniform_nested_is_inline(self):
        data = {"rows": [{"id": 1, "m": {"a": 1}}, {"id": 2, "m": {"b": 2}}]}
        assert serialize(data) == "rows:id,m:\n1,(a:1)\n2,(b:2)"

    def test_field_order(self):
        data = [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]
        options = SerializeOptions(field_order=["name", "missing"])
        assert serialize(data, options) == ":name,id:\nA,1\nB,2"


class TestInferSchema:
    """Test schema inference."""

    def test_uniform(self):
        schema = infer_schema([{"a": 1, "b": {"c": 2}}, {"b": {"c": 3}, "a": 4}])
        assert schema == (FieldNode("a"), FieldNode("b", (FieldNode("c"),)))

    def test_differing_keys(self):
        assert infer_schema([{"a": 1}, {"b": 2}]) is None

    def test_not_records(self):
        assert infer_schema([1, 2]) is None
        assert infer_schema([]) is None
        assert infer_schema([{}]) is None


class TestNormalization:
    """Test conversion of non-JSON Python values."""

    def test_tuple_and_set(self):
        assert serialize({"t": (1, 2), "s": {3, 1}}) == ":t,s:\n[1,2],[1,3]"

    def test_date(self):
        assert serialize({"d": date(2024, 1, 2)}) == ":d:\n2024-01-02"

    def test_non_string_keys(self):
        assert serialize({1: "a"}) == ":1:\na"

    def test_integer_beyond_64_bits(self):
        assert serialize({"n": 2**64}) == ":n:\n\\18446744073709551616"
        assert serialize({"n": 2**63 - 1}) == ":n:\n9223372036854775807"


class TestOptions:
    """Test option validation and limits."""

    def test_indentless_only(self):
        with pytest.raises(ValueError):
            SerializeOptions(indentless=False)

    def test_bad_field_order(self):
        with pytest.raises(ValueError):
            SerializeOptions(field_order="alphabetical")

    def test_depth_limit(self):
        with pytest.raises(MaxDepthExceededError):
            serialize([[[[1]]]], SerializeOptions(max_depth=3))
        assert serialize([[[1]]], SerializeOptions(max_depth=3)) == "[[[1]]]"
