"""Header line parsing and formatting for ORT."""

from __future__ import annotations

import logging
import re

from .config import ORT_MAX_DEPTH
from .errors import (
    DuplicateFieldError,
    MalformedHeaderError,
    MaxDepthExceededError,
    UnbalancedDelimiterError,
)
from .string_utils import find_matching, is_valid_identifier, split_top_level, strip_token
from .types import FieldNode, FieldSchema, ParsedLine, Section

logger = logging.getLogger(__name__)

SECTION_KEY = r"[A-Za-z_][A-Za-z0-9_.\-]*"

SECTION_KEY_PATTERN = re.compile(rf"^{SECTION_KEY}$")

# key:  (literal section, no fields)
LITERAL_HEADER_PATTERN = re.compile(rf"^(?P<key>{SECTION_KEY}):$")

# key:fields:  or  :fields:
HEADER_PATTERN = re.compile(rf"^(?P<key>{SECTION_KEY})?:(?P<fields>.*):$")


def parse_header(
    line: ParsedLine, *, max_depth: int = ORT_MAX_DEPTH, strict: bool = False
) -> Section | None:
    """
    Recognize a header line and build its section.

    Args:
        line: The preprocessed line.
        max_depth: Maximum nesting of child field lists.
        strict: Reject non-identifier field names instead of warning.

    Returns:
        A new, empty Section, or None if the line is a data line.

    Raises:
        MalformedHeaderError: If the field list is malformed.
        DuplicateFieldError: If sibling field names repeat.
    """
    content = line.content
    if not _ends_with_unescaped_colon(content):
        return None

    match = LITERAL_HEADER_PATTERN.match(content)
    if match:
        return Section(key=match.group("key"), schema=(), line_number=line.line_number)

    match = HEADER_PATTERN.match(content)
    if not match:
        return None

    try:
        schema = parse_field_list(match.group("fields"), max_depth=max_depth, strict=strict)
    except (MalformedHeaderError, DuplicateFieldError, MaxDepthExceededError) as exc:
        raise exc.locate(line.line_number, content)

    return Section(key=match.group("key"), schema=schema, line_number=line.line_number)


def parse_field_list(
    fields: str, *, max_depth: int = ORT_MAX_DEPTH, strict: bool = False, depth: int = 0
) -> FieldSchema:
    """
    Parse a comma-separated field list into a schema.

    Args:
        fields: The text between the header colons (or inside a child group).
        max_depth: Maximum nesting of child field lists.
        strict: Reject non-identifier field names instead of warning.
        depth: Current nesting level.

    Returns:
        The field schema.
    """
    if depth > max_depth:
        raise MaxDepthExceededError(max_depth)

    if not strip_token(fields):
        raise MalformedHeaderError("Empty field list")

    try:
        tokens = split_top_level(fields, max_depth=max_depth)
    except UnbalancedDelimiterError as exc:
        raise MalformedHeaderError(f"Unbalanced parentheses in field list: {fields}") from exc

    schema = []
    seen = set()
    for token in tokens:
        node = _parse_field(strip_token(token), max_depth, strict, depth)
        if node.name in seen:
            raise DuplicateFieldError(f"Duplicate field name: {node.name}")
        seen.add(node.name)
        schema.append(node)

    return tuple(schema)


def _parse_field(token: str, max_depth: int, strict: bool, depth: int) -> FieldNode:
    """Parse one field token: ``name`` or ``name(childlist)``."""
    if not token:
        raise MalformedHeaderError("Empty field name")
    if ":" in token:
        raise MalformedHeaderError(f"Unexpected ':' in field: {token}")
    if "[" in token or "]" in token:
        raise MalformedHeaderError(f"Brackets are not allowed in field: {token}")

    open_pos = token.find("(")
    if open_pos == -1:
        if ")" in token:
            raise MalformedHeaderError(f"Unbalanced parentheses in field: {token}")
        return FieldNode(_check_name(token, strict))

    if find_matching(token, open_pos) != len(token) - 1:
        raise MalformedHeaderError(f"Unexpected text after child fields: {token}")

    name = _check_name(strip_token(token[:open_pos]), strict)
    inner = token[open_pos + 1 : -1]
    if not strip_token(inner):
        raise MalformedHeaderError(f"Empty child field list: {token}")

    children = parse_field_list(inner, max_depth=max_depth, strict=strict, depth=depth + 1)
    return FieldNode(name, children)


def _check_name(name: str, strict: bool) -> str:
    """Validate a field name; non-identifiers only warn unless strict."""
    if not name:
        raise MalformedHeaderError("Empty field name")
    if not is_valid_identifier(name):
        if strict:
            raise MalformedHeaderError(f"Field name is not an identifier: {name}")
        logger.warning("Field name %r is not an identifier", name)
    return name


def _ends_with_unescaped_colon(content: str) -> bool:
    """Check the line ends with ':' not preceded by an escaping backslash."""
    if not content.endswith(":"):
        return False
    body = content[:-1]
    backslashes = len(body) - len(body.rstrip("\\"))
    return backslashes % 2 == 0


def is_section_key(key: str) -> bool:
    """Check if a string can be used as a section key."""
    return bool(SECTION_KEY_PATTERN.fullmatch(key))


def format_header(key: str | None, schema: FieldSchema) -> str:
    """
    Format a header line.

    Args:
        key: Section key (None for the top-level form).
        schema: Field schema (empty for a literal section).

    Returns:
        The header line.
    """
    if not schema:
        return f"{key}:"
    fields_part = ",".join(str(node) for node in schema)
    return f"{key or ''}:{fields_part}:"
