"""ORT serializer implementation."""

from __future__ import annotations

import math
import re
from collections.abc import Generator
from typing import Any

from .errors import MaxDepthExceededError
from .header import format_header, is_section_key
from .primitives import INT_MAX, INT_MIN, encode_primitive
from .string_utils import escape_string
from .types import FieldNode, FieldOrder, FieldSchema, JsonValue, SerializeOptions

# Field names usable in a header without escaping
PLAIN_NAME_PATTERN = re.compile(r"[^\s,():\[\]\\]+")


def serialize(document: Any, options: SerializeOptions | None = None) -> str:
    """
    Serialize a Python value to ORT text.

    Args:
        document: The value to serialize (usually a dict or list of dicts).
        options: Serialization options.

    Returns:
        The ORT-formatted string, without a trailing newline.
    """
    opts = options or SerializeOptions()
    return "\n".join(serialize_lines(document, opts))


def serialize_lines(
    document: Any, options: SerializeOptions | None = None
) -> Generator[str, None, None]:
    """
    Serialize a Python value to ORT, yielding lines.

    Args:
        document: The value to serialize.
        options: Serialization options.

    Yields:
        Lines of ORT output.
    """
    opts = options or SerializeOptions()
    normalized = _normalize_value(document, 0, opts.max_depth)

    # Root form detection
    if isinstance(normalized, dict):
        if not normalized:
            return
        if _use_keyed_sections(normalized, opts):
            yield from _encode_keyed_sections(normalized, opts)
        else:
            yield from _encode_root_object(normalized, opts)
    elif isinstance(normalized, list):
        yield from _encode_root_array(normalized, opts)
    else:
        yield from _encode_value_line(normalized, opts)


def _use_keyed_sections(obj: dict, opts: SerializeOptions) -> bool:
    """Keyed sections pay off when at least one value is a record table."""
    if not all(is_section_key(key) for key in obj):
        return False
    return any(
        isinstance(value, list) and infer_schema(value, opts.field_order) is not None
        for value in obj.values()
    )


def _encode_keyed_sections(obj: dict, opts: SerializeOptions) -> Generator[str, None, None]:
    """Encode each root key as its own section."""
    for key, value in obj.items():
        lines = None
        if isinstance(value, list):
            schema = infer_schema(value, opts.field_order)
            if schema is not None:
                lines = _encode_table(key, value, schema, opts)

        if lines is None:
            # Literal section
            lines = [format_header(key, ()), *_encode_value_line(value, opts)]

        yield from lines


def _encode_root_object(obj: dict, opts: SerializeOptions) -> Generator[str, None, None]:
    """Encode a root object as a single top-level record."""
    schema = infer_schema([obj], opts.field_order)
    lines = _encode_table(None, [obj], schema, opts) if schema is not None else None
    if lines is None:
        yield from _encode_value_line(obj, opts)
    else:
        yield from lines


def _encode_root_array(arr: list, opts: SerializeOptions) -> Generator[str, None, None]:
    """Encode a root array as a top-level record table when possible."""
    # A single top-level record reads back as an object, not a list
    lines = None
    if len(arr) > 1:
        schema = infer_schema(arr, opts.field_order)
        if schema is not None:
            lines = _encode_table(None, arr, schema, opts)

    if lines is None:
        yield from _encode_value_line(arr, opts)
    else:
        yield from lines


def _encode_table(
    key: str | None, records: list[dict], schema: FieldSchema, opts: SerializeOptions
) -> list[str] | None:
    """Encode a header and one row per record, or None if a row would be blank."""
    rows = [encode_record(record, schema, opts) for record in records]
    if not all(rows):
        return None
    return [format_header(key, schema), *rows]


def _encode_value_line(value: JsonValue, opts: SerializeOptions) -> Generator[str, None, None]:
    """Encode a value on a line of its own (nothing for a blank rendering)."""
    line = encode_value(value, None, opts)
    if line:
        yield line


def encode_record(record: dict, schema: FieldSchema, opts: SerializeOptions) -> str:
    """
    Encode one record as a positional data line.

    Args:
        record: The record; its keys match the schema.
        schema: The section schema.
        opts: Serialization options.

    Returns:
        The data line.
    """
    return ",".join(
        encode_value(record.get(node.name), node.children, opts) for node in schema
    )


def encode_value(
    value: JsonValue, schema: FieldSchema | None, opts: SerializeOptions, depth: int = 0
) -> str:
    """
    Encode a value as a token.

    Args:
        value: The normalized value.
        schema: Child schema when the value is a positional nested object.
        opts: Serialization options.
        depth: Nesting level of the token.

    Returns:
        The encoded token.
    """
    if isinstance(value, dict):
        _check_depth(depth, opts.max_depth)
        if not value:
            return "()"
        if schema:
            parts = [
                encode_value(value.get(node.name), node.children, opts, depth + 1)
                for node in schema
            ]
        else:
            parts = [
                f"{escape_string(key)}:{encode_value(item, None, opts, depth + 1)}"
                for key, item in value.items()
            ]
        # "()" would read back as an empty object
        return f"({','.join(parts) or ' '})"

    if isinstance(value, list):
        _check_depth(depth, opts.max_depth)
        if not value:
            return "[]"
        inner = ",".join(encode_value(item, None, opts, depth + 1) for item in value)
        return f"[{inner or ' '}]"

    return encode_primitive(value)


def _check_depth(depth: int, max_depth: int) -> None:
    if depth + 1 > max_depth:
        raise MaxDepthExceededError(max_depth)


def infer_schema(records: list, field_order: FieldOrder = "first-seen") -> FieldSchema | None:
    """
    Infer a header schema from a list of records.

    Records qualify when they are all dicts sharing one non-empty set of
    plain field names. A field gets child fields when all of its non-null
    values qualify the same way.

    Args:
        records: Candidate records.
        field_order: "first-seen" or an explicit list of leading field names.

    Returns:
        The schema, or None if the records are not uniform.
    """
    if not records or not all(isinstance(record, dict) for record in records):
        return None

    keys = list(records[0])
    if not keys or not all(is_plain_name(key) for key in keys):
        return None

    key_set = set(keys)
    if any(set(record) != key_set for record in records[1:]):
        return None

    return tuple(
        FieldNode(key, _infer_children([record[key] for record in records]))
        for key in _order_fields(keys, field_order)
    )


def _infer_children(values: list) -> FieldSchema | None:
    """Infer child fields for a column, or None for a leaf column."""
    present = [value for value in values if value is not None]
    if not present:
        return None
    return infer_schema(present)


def _order_fields(keys: list[str], field_order: FieldOrder) -> list[str]:
    """Apply an explicit field order; unlisted fields keep first-seen order."""
    if field_order == "first-seen":
        return keys
    leading = [name for name in dict.fromkeys(field_order) if name in keys]
    return leading + [key for key in keys if key not in leading]


def is_plain_name(name: str) -> bool:
    """Check if a key can be written as a header field name."""
    return bool(PLAIN_NAME_PATTERN.fullmatch(name))


def _normalize_value(value: Any, depth: int, max_depth: int) -> JsonValue:
    """
    Normalize a value for ORT compatibility.

    Converts:
    - Tuples and other iterables to lists
    - Sets to sorted lists
    - Date-like objects to ISO strings
    - NaN and infinities to None
    - Integers outside the 64-bit range to strings
    - Non-string keys to strings

    Args:
        value: The value to normalize.
        depth: Current nesting level.
        max_depth: Maximum nesting depth.

    Returns:
        An ORT-compatible value.
    """
    # Root object, section list and record wrap the row tokens; encode_value
    # enforces the exact limit on the tokens themselves
    if depth > max_depth + 3:
        raise MaxDepthExceededError(max_depth)

    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, int):
        if INT_MIN <= value <= INT_MAX:
            return value
        return str(value)

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    if isinstance(value, dict):
        return {str(k): _normalize_value(v, depth + 1, max_depth) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_normalize_value(v, depth + 1, max_depth) for v in value]

    if isinstance(value, (set, frozenset)):
        return [_normalize_value(v, depth + 1, max_depth) for v in sorted(value, key=str)]

    if hasattr(value, "isoformat"):
        return value.isoformat()

    if hasattr(value, "__iter__"):
        return [_normalize_value(v, depth + 1, max_depth) for v in value]

    # Last resort: string conversion
    return str(value)
