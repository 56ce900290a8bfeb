"""String utilities for ORT: escape handling and delimiter-depth tokenizing."""

from __future__ import annotations

import re

from .config import ORT_MAX_DEPTH
from .errors import MaxDepthExceededError, UnbalancedDelimiterError

# ORT recognizes these 9 escape sequences; any other \x yields x
ESCAPE_MAP = {
    "\\": "\\\\",
    ",": "\\,",
    "(": "\\(",
    ")": "\\)",
    "[": "\\[",
    "]": "\\]",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

UNESCAPE_MAP = {
    "\\": "\\",
    ",": ",",
    "(": "(",
    ")": ")",
    "[": "[",
    "]": "]",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}

OPENERS = {"(": ")", "[": "]"}
CLOSERS = {")": "(", "]": "["}

# Horizontal whitespace trimmed from lines and tokens
HORIZONTAL_WS = " \t"

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def escape_string(value: str) -> str:
    """
    Escape text so it reads back verbatim as a scalar token.

    Produces the table escapes plus:
    - \\: for colons (keeps text from looking like a header or inline key)
    - \\<space> for leading and trailing spaces (which would otherwise be trimmed)

    Args:
        value: The raw text.

    Returns:
        The escaped text.
    """
    result = []
    for char in value:
        if char in ESCAPE_MAP:
            result.append(ESCAPE_MAP[char])
        elif char == ":":
            result.append("\\:")
        else:
            result.append(char)

    # Protect edge spaces from trimming
    lead = len(value) - len(value.lstrip(" "))
    if lead == len(value):
        return "\\ " * lead
    trail = len(value) - len(value.rstrip(" "))
    if lead:
        result[:lead] = ["\\ "] * lead
    if trail:
        result[len(result) - trail :] = ["\\ "] * trail
    return "".join(result)


def unescape_string(value: str) -> str:
    """
    Resolve backslash escapes in a raw scalar token.

    Recognized sequences map through UNESCAPE_MAP. An unrecognized sequence
    yields the escaped character alone, and a lone backslash at the end is
    kept. Never raises.

    Args:
        value: The raw token text.

    Returns:
        The unescaped string.
    """
    if "\\" not in value:
        return value

    result = []
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\":
            if i + 1 >= len(value):
                result.append(char)
                break
            next_char = value[i + 1]
            result.append(UNESCAPE_MAP.get(next_char, next_char))
            i += 2
        else:
            result.append(char)
            i += 1
    return "".join(result)


def strip_token(token: str) -> str:
    """
    Trim horizontal whitespace, keeping an escaped trailing space or tab.

    Args:
        token: The token or line to trim.

    Returns:
        The trimmed text.
    """
    left = token.lstrip(HORIZONTAL_WS)
    stripped = left.rstrip(HORIZONTAL_WS)
    if len(stripped) < len(left):
        backslashes = len(stripped) - len(stripped.rstrip("\\"))
        if backslashes % 2:
            return left[: len(stripped) + 1]
    return stripped


def split_top_level(
    value: str, separators: str = ",", max_depth: int = ORT_MAX_DEPTH
) -> list[str]:
    """
    Split a string at separators that sit outside every ( ) and [ ] group.

    Escaped characters never split and never change depth.

    Args:
        value: The string to split.
        separators: Characters that split at depth zero.
        max_depth: Maximum allowed nesting.

    Returns:
        The untrimmed top-level pieces (always at least one).

    Raises:
        UnbalancedDelimiterError: If groups do not balance.
        MaxDepthExceededError: If nesting exceeds max_depth.
    """
    result = []
    current = []
    stack: list[str] = []
    i = 0

    while i < len(value):
        char = value[i]
        if char == "\\":
            # Keep escape sequence intact
            current.append(value[i : i + 2])
            i += 2
            continue
        if char in OPENERS:
            stack.append(char)
            if len(stack) > max_depth:
                raise MaxDepthExceededError(max_depth)
        elif char in CLOSERS:
            if not stack:
                raise UnbalancedDelimiterError(f"Unexpected '{char}' at column {i + 1}")
            if stack.pop() != CLOSERS[char]:
                raise UnbalancedDelimiterError(f"Mismatched '{char}' at column {i + 1}")
        elif char in separators and not stack:
            result.append("".join(current))
            current = []
            i += 1
            continue
        current.append(char)
        i += 1

    if stack:
        raise UnbalancedDelimiterError(f"Unclosed '{stack[-1]}' in: {value}")

    result.append("".join(current))
    return result


def check_balance(value: str, max_depth: int = ORT_MAX_DEPTH) -> None:
    """Raise if ( ) and [ ] groups in value do not balance."""
    split_top_level(value, separators="", max_depth=max_depth)


def find_top_level(value: str, target: str) -> int:
    """
    Find the first unescaped occurrence of a character outside all groups.

    Args:
        value: The string to search (assumed balanced).
        target: The character to find.

    Returns:
        Index of the character, or -1 if not found.
    """
    depth = 0
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\":
            i += 2
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        elif char == target and depth == 0:
            return i
        i += 1
    return -1


def find_matching(value: str, start: int) -> int:
    """
    Find the delimiter that closes the opener at ``start``.

    Args:
        value: The string to search.
        start: Index of an opening ( or [.

    Returns:
        Index of the matching closer, or -1 if the group never closes.

    Raises:
        UnbalancedDelimiterError: If a closer of the wrong kind ends a group.
    """
    stack: list[str] = []
    i = start
    while i < len(value):
        char = value[i]
        if char == "\\":
            i += 2
            continue
        if char in OPENERS:
            stack.append(char)
        elif char in CLOSERS:
            if not stack or stack.pop() != CLOSERS[char]:
                raise UnbalancedDelimiterError(f"Mismatched '{char}' at column {i + 1}")
            if not stack:
                return i
        i += 1
    return -1


def is_valid_identifier(name: str) -> bool:
    """
    Check if a field name is a conventional identifier.

    Valid names:
    - Start with letter or underscore
    - Only letters, digits, underscores

    Args:
        name: The name to check.

    Returns:
        True if the name is an identifier.
    """
    return bool(IDENTIFIER_PATTERN.fullmatch(name))
