"""Recursive value parsing for ORT tokens."""

from __future__ import annotations

from .config import ORT_MAX_DEPTH
from .errors import (
    ArityMismatchError,
    DuplicateFieldError,
    MaxDepthExceededError,
    SchemaRequiredError,
)
from .primitives import parse_scalar
from .string_utils import (
    check_balance,
    find_matching,
    find_top_level,
    split_top_level,
    strip_token,
    unescape_string,
)
from .types import FieldSchema, JsonValue


def parse_value(
    token: str, schema: FieldSchema | None = None, *, max_depth: int = ORT_MAX_DEPTH
) -> JsonValue:
    """
    Parse one ORT value token.

    Args:
        token: The raw token (a data-line field, array element, or literal line).
        schema: Child schema bound to this value, if any.
        max_depth: Maximum nesting depth.

    Returns:
        The parsed Python value.

    Raises:
        UnbalancedDelimiterError: If groups in the token do not balance.
        ArityMismatchError: If a positional object has the wrong value count.
        SchemaRequiredError: If a ( ) group has neither schema nor keys.
        MaxDepthExceededError: If nesting exceeds max_depth.
    """
    check_balance(token, max_depth)
    return _parse_value(token, schema, 0, max_depth)


def _parse_value(
    token: str, schema: FieldSchema | None, depth: int, max_depth: int
) -> JsonValue:
    if depth > max_depth:
        raise MaxDepthExceededError(max_depth)

    token = strip_token(token)

    if not token:
        return None
    if token == "[]":
        return []
    if token == "()":
        return {}

    opener = token[0]
    if opener in "[(" and find_matching(token, 0) == len(token) - 1:
        elements = split_top_level(token[1:-1], max_depth=max_depth)
        if opener == "[":
            return [_parse_value(element, None, depth + 1, max_depth) for element in elements]
        if schema:
            return _parse_positional_object(token, elements, schema, depth + 1, max_depth)
        return _parse_keyed_object(token, elements, depth + 1, max_depth)

    return parse_scalar(token)


def _parse_positional_object(
    token: str, elements: list[str], schema: FieldSchema, depth: int, max_depth: int
) -> dict:
    """Bind ( ) elements to child fields by position."""
    if len(elements) != len(schema):
        raise ArityMismatchError(len(schema), len(elements), raw=token)

    return {
        node.name: _parse_value(element, node.children, depth, max_depth)
        for node, element in zip(schema, elements)
    }


def _parse_keyed_object(token: str, elements: list[str], depth: int, max_depth: int) -> dict:
    """Parse ( ) elements as inline key:value pairs."""
    colons = [find_top_level(element, ":") for element in elements]
    if all(pos == -1 for pos in colons):
        raise SchemaRequiredError(
            f"Parenthesized value needs a field schema or inline keys: {token}"
        )

    result = {}
    for element, colon_pos in zip(elements, colons):
        if colon_pos == -1:
            raise SchemaRequiredError(f"Inline object element has no key: {strip_token(element)}")

        key = unescape_string(strip_token(element[:colon_pos]))
        if key in result:
            raise DuplicateFieldError(f"Duplicate key in inline object: {key}")
        result[key] = _parse_value(element[colon_pos + 1 :], None, depth, max_depth)

    return result
