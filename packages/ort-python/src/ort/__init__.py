"""
ORT (Object Record Table) - Python Implementation

A compact data-interchange format for LLM exchanges: CSV-style positional
rows under a header, with JSON-style nested objects and arrays inline.

Usage:
    import ort

    # Serialize Python data to ORT
    data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
    text = ort.serialize(data)
    # users:id,name:
    # 1,Alice
    # 2,Bob

    # Parse ORT back to Python data
    assert ort.parse(text) == data

    # With options
    from ort import ParseOptions, SerializeOptions

    text = ort.serialize(data, SerializeOptions(field_order=["name"]))
    value = ort.parse(text, ParseOptions(strict=True, max_depth=16))
"""

import logging

__version__ = "0.1.0"

from .decode import iter_records, iter_sections, parse, parse_lines, parse_stream_async
from .encode import encode_value, infer_schema, serialize, serialize_lines
from .errors import (
    ArityMismatchError,
    ConflictingRootError,
    DuplicateFieldError,
    EncodingError,
    FieldCountMismatchError,
    MalformedHeaderError,
    MalformedSectionError,
    MaxDepthExceededError,
    ORTError,
    SchemaRequiredError,
    UnbalancedDelimiterError,
)
from .string_utils import escape_string, split_top_level, unescape_string
from .types import FieldNode, FieldSchema, JsonValue, ParseOptions, SerializeOptions
from .values import parse_value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Main API
    "parse",
    "parse_lines",
    "parse_stream_async",
    "iter_records",
    "iter_sections",
    "serialize",
    "serialize_lines",
    # Building blocks
    "parse_value",
    "encode_value",
    "infer_schema",
    "split_top_level",
    "escape_string",
    "unescape_string",
    # Options
    "ParseOptions",
    "SerializeOptions",
    # Types
    "FieldNode",
    "FieldSchema",
    "JsonValue",
    # Errors
    "ORTError",
    "EncodingError",
    "MalformedHeaderError",
    "DuplicateFieldError",
    "UnbalancedDelimiterError",
    "FieldCountMismatchError",
    "ArityMismatchError",
    "SchemaRequiredError",
    "ConflictingRootError",
    "MaxDepthExceededError",
    "MalformedSectionError",
]
