"""Scalar value encoding and parsing for ORT."""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING

from .string_utils import UNESCAPE_MAP, escape_string, unescape_string

if TYPE_CHECKING:
    from .types import JsonPrimitive

logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r"-?[0-9]+")
FLOAT_PATTERN = re.compile(r"-?[0-9]+\.[0-9]+")

BOOLEAN_LITERALS = {"true": True, "false": False}

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def parse_scalar(token: str) -> "JsonPrimitive":
    """
    Parse a trimmed, non-structural token to a Python scalar.

    A token carrying any escape is always a string. Otherwise the integer
    grammar is tried first, then the float grammar, then the lowercase
    boolean literals; anything else is a string. Numeric literals outside
    the 64-bit range stay strings.

    Args:
        token: The token string (trimmed).

    Returns:
        The parsed Python value.
    """
    if not token:
        return None

    # Escaping forces a string: \007 stays "007"
    if "\\" in token:
        return unescape_string(token)

    if INTEGER_PATTERN.fullmatch(token):
        number = _parse_integer(token)
        if number is not None:
            return number
        logger.warning("Integer literal %s is out of 64-bit range; kept as a string", token)
        return token
    if FLOAT_PATTERN.fullmatch(token):
        number = float(token)
        if not math.isinf(number):
            return number
        logger.warning("Float literal %s is out of range; kept as a string", token)
        return token
    if token in BOOLEAN_LITERALS:
        return BOOLEAN_LITERALS[token]

    return token


def _parse_integer(token: str) -> int | None:
    """Parse an integer literal, or return None when it is out of 64-bit range."""
    sign = -1 if token.startswith("-") else 1
    digits = token.lstrip("-").lstrip("0") or "0"
    # No 64-bit value has more than 19 digits
    if len(digits) > 19:
        return None
    number = sign * int(digits)
    return number if INT_MIN <= number <= INT_MAX else None


def encode_primitive(value: "JsonPrimitive") -> str:
    """
    Encode a scalar value to its ORT token.

    Args:
        value: The primitive value (str, int, float, bool, or None).

    Returns:
        The encoded token.
    """
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _encode_number(value)

    if isinstance(value, str):
        return encode_string_literal(value)

    raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def _encode_number(value: int | float) -> str:
    """Encode a number in plain decimal form."""
    if isinstance(value, int):
        return str(value)

    if math.isnan(value) or math.isinf(value):
        return ""

    s = repr(value)
    if "e" in s or "E" in s:
        # No exponent notation in ORT
        s = format(Decimal(s), "f")
    if "." not in s:
        # Keep the float tag: 3.0 must not read back as 3
        s += ".0"
    return s


def encode_string_literal(value: str) -> str:
    """
    Encode a string so that it reads back as the same string.

    Args:
        value: The string to encode.

    Returns:
        The escaped token.
    """
    if not value:
        logger.warning("Empty string has no ORT form distinct from null; encoding as null")
        return ""

    encoded = escape_string(value)
    if looks_like_literal(value):
        return _force_string(encoded)
    if encoded.startswith(("#", "\ufeff")):
        # Would read as a comment or a BOM at line start
        return "\\" + encoded
    return encoded


def looks_like_literal(value: str) -> bool:
    """Check if unescaped text would parse as a number or boolean."""
    return bool(
        INTEGER_PATTERN.fullmatch(value)
        or FLOAT_PATTERN.fullmatch(value)
        or value in BOOLEAN_LITERALS
    )


def _force_string(encoded: str) -> str:
    """Insert a no-op escape before the first character that has no escape meaning."""
    for i, char in enumerate(encoded):
        if char not in UNESCAPE_MAP:
            return encoded[:i] + "\\" + encoded[i:]
    return encoded
