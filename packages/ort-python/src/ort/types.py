"""Type definitions for ORT parser/serializer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .config import ORT_MAX_DEPTH

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

FieldOrder = Literal["first-seen"] | list[str]


@dataclass(frozen=True)
class FieldNode:
    """One field of a header schema."""

    name: str
    """Field name, unique among its siblings."""

    children: FieldSchema | None = None
    """Child schema for a nested-object field, None for a leaf."""

    def __str__(self) -> str:
        if self.children is None:
            return self.name
        return f"{self.name}({','.join(str(child) for child in self.children)})"


FieldSchema = tuple[FieldNode, ...]


@dataclass(frozen=True)
class ParsedLine:
    """A preprocessed, non-blank, non-comment line."""

    line_number: int
    """1-based physical line number."""

    content: str
    """Line content after trimming."""


@dataclass(frozen=True)
class Section:
    """A header plus the data lines that follow it."""

    key: str | None
    """Section key, None for the top-level form."""

    schema: FieldSchema
    """Field schema, empty for literal and standalone sections."""

    line_number: int
    """Line number of the header (or of the first standalone line)."""

    lines: tuple[ParsedLine, ...] = ()
    """Data lines in document order."""

    @property
    def is_literal(self) -> bool:
        """Whether data lines are parsed as values rather than records."""
        return not self.schema

    @property
    def is_standalone(self) -> bool:
        """Whether this is a bare value that appeared before any header."""
        return self.key is None and not self.schema


@dataclass
class ParseOptions:
    """Options for ORT parsing."""

    max_depth: int = ORT_MAX_DEPTH
    """Maximum nesting depth for values and header child lists."""

    strict: bool = False
    """Reject non-identifier field names and duplicate section keys."""


@dataclass
class SerializeOptions:
    """Options for ORT serialization."""

    indentless: bool = True
    """ORT output carries no padding; only True is accepted."""

    field_order: FieldOrder = "first-seen"
    """Column order for record sections: first record's order or an explicit list."""

    max_depth: int = ORT_MAX_DEPTH
    """Maximum nesting depth of the serialized value."""

    def __post_init__(self) -> None:
        if not self.indentless:
            raise ValueError("ORT output is always indentless")
        if self.field_order != "first-seen" and not isinstance(self.field_order, list):
            raise ValueError(
                f"field_order must be 'first-seen' or a list of names, got {self.field_order!r}"
            )
