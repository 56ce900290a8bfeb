"""ORT parser: section grouping, record binding and document assembly."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Generator, Iterable, Iterator
from dataclasses import replace

from .errors import (
    ConflictingRootError,
    DuplicateFieldError,
    FieldCountMismatchError,
    MalformedSectionError,
    ORTError,
)
from .header import parse_header
from .lines import preprocess
from .string_utils import split_top_level
from .types import FieldSchema, JsonValue, ParsedLine, ParseOptions, Section
from .values import parse_value

logger = logging.getLogger(__name__)


def parse(text: str | bytes, options: ParseOptions | None = None) -> JsonValue:
    """
    Parse ORT text to a Python value.

    Args:
        text: The ORT document, as text or UTF-8 bytes.
        options: Parsing options.

    Returns:
        A dict of keyed sections, a single record dict, a list of records,
        or a standalone value. An empty document yields {}.

    Raises:
        ORTError: For the first malformed construct found.
    """
    opts = options or ParseOptions()
    return _assemble(iter_sections(preprocess(text), opts), opts)


def parse_lines(lines: Iterable[str], options: ParseOptions | None = None) -> JsonValue:
    """
    Parse ORT from pre-split lines.

    Args:
        lines: Iterable of physical line strings (terminators optional).
        options: Parsing options.

    Returns:
        The parsed document.
    """
    opts = options or ParseOptions()
    return _assemble(iter_sections(preprocess(lines), opts), opts)


async def parse_stream_async(
    lines: AsyncIterable[str], options: ParseOptions | None = None
) -> JsonValue:
    """
    Parse ORT from an async iterable of lines.

    Args:
        lines: Async iterable of line strings.
        options: Parsing options.

    Returns:
        The parsed document.
    """
    collected = []
    async for line in lines:
        collected.append(line)
    return parse_lines(collected, options)


def iter_records(
    source: str | bytes | Iterable[str], options: ParseOptions | None = None
) -> Generator[tuple[str | None, JsonValue], None, None]:
    """
    Stream values section by section without building the document.

    Record sections yield one (key, record) pair per data line; literal and
    standalone sections yield one (key, value) pair per line. Root-form rules
    (single record unwrapping, conflicting roots) are not applied.

    Args:
        source: Document text, UTF-8 bytes, or an iterable of lines.
        options: Parsing options.

    Yields:
        (section key, value) pairs in document order.
    """
    opts = options or ParseOptions()
    for section in iter_sections(preprocess(source), opts):
        for line in section.lines:
            if section.is_literal:
                yield section.key, _parse_literal(line, opts)
            else:
                yield section.key, bind_record(line, section.schema, opts.max_depth)


def iter_sections(
    lines: Iterable[ParsedLine], options: ParseOptions | None = None
) -> Generator[Section, None, None]:
    """
    Group preprocessed lines into sections.

    A section is yielded once the next header (or end of input) is seen, so
    only one section's data lines are held at a time. Lines before the first
    header form a standalone section with no key and no schema.

    Args:
        lines: Preprocessed lines.
        options: Parsing options.

    Yields:
        Sections in document order.
    """
    opts = options or ParseOptions()
    current: Section | None = None
    pending: list[ParsedLine] = []

    for line in lines:
        section = parse_header(line, max_depth=opts.max_depth, strict=opts.strict)
        if section is not None:
            if current is not None:
                yield replace(current, lines=tuple(pending))
            logger.debug(
                "Line %d: opened section %r with %d fields",
                line.line_number,
                section.key,
                len(section.schema),
            )
            current = section
            pending = []
            continue

        if current is None:
            current = Section(key=None, schema=(), line_number=line.line_number)
        pending.append(line)

    if current is not None:
        yield replace(current, lines=tuple(pending))


def bind_record(line: ParsedLine, schema: FieldSchema, max_depth: int) -> dict:
    """
    Bind one data line to a schema.

    Args:
        line: The data line.
        schema: The section's top-level schema.
        max_depth: Maximum nesting depth.

    Returns:
        The record, keyed by field names in schema order.

    Raises:
        FieldCountMismatchError: If the value count differs from the field count.
    """
    try:
        tokens = split_top_level(line.content, max_depth=max_depth)
        if len(tokens) != len(schema):
            raise FieldCountMismatchError(len(schema), len(tokens))
        return {
            node.name: parse_value(token, node.children, max_depth=max_depth)
            for node, token in zip(schema, tokens)
        }
    except ORTError as exc:
        raise exc.locate(line.line_number, line.content)


def _parse_literal(line: ParsedLine, options: ParseOptions) -> JsonValue:
    """Parse a whole line as one value."""
    try:
        return parse_value(line.content, max_depth=options.max_depth)
    except ORTError as exc:
        raise exc.locate(line.line_number, line.content)


def _assemble(sections: Iterator[Section], options: ParseOptions) -> JsonValue:
    """Merge section contributions into the document root."""
    keyed: dict[str, JsonValue] = {}
    root: JsonValue = None
    root_section: Section | None = None

    for section in sections:
        if section.key is None:
            if root_section is not None or keyed:
                raise ConflictingRootError(
                    "Top-level value cannot be combined with other sections",
                    line_number=section.line_number,
                )
            root_section = section
            root = _section_value(section, options)
            continue

        if root_section is not None:
            raise ConflictingRootError(
                f"Section {section.key!r} conflicts with the top-level value "
                f"from line {root_section.line_number}",
                line_number=section.line_number,
            )

        if section.key in keyed:
            if options.strict:
                raise DuplicateFieldError(
                    f"Duplicate section key: {section.key}", line_number=section.line_number
                )
            logger.warning(
                "Line %d: section %r overrides an earlier section",
                section.line_number,
                section.key,
            )
        keyed[section.key] = _section_value(section, options)

    if root_section is not None:
        return root
    return keyed


def _section_value(section: Section, options: ParseOptions) -> JsonValue:
    """Compute one section's contribution."""
    if section.is_standalone:
        if len(section.lines) > 1:
            extra = section.lines[1]
            raise ConflictingRootError(
                "Only one value line may appear before the first header",
                line_number=extra.line_number,
                raw=extra.content,
            )
        return _parse_literal(section.lines[0], options)

    if section.is_literal:
        if not section.lines:
            return None
        if len(section.lines) > 1:
            extra = section.lines[1]
            raise MalformedSectionError(
                f"Section {section.key!r} takes a single value line",
                line_number=extra.line_number,
                raw=extra.content,
            )
        return _parse_literal(section.lines[0], options)

    records = [bind_record(line, section.schema, options.max_depth) for line in section.lines]
    if section.key is None and len(records) == 1:
        return records[0]
    return records
