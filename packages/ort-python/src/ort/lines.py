"""Line preprocessing for ORT input."""

from __future__ import annotations

from collections.abc import Generator, Iterable

from .errors import EncodingError
from .string_utils import strip_token
from .types import ParsedLine

BOM = "\ufeff"


def decode_source(source: str | bytes) -> str:
    """
    Turn raw input into text with a normalized start.

    Args:
        source: Text, or UTF-8 bytes.

    Returns:
        The text without a leading BOM.

    Raises:
        EncodingError: If bytes are not valid UTF-8.
    """
    if isinstance(source, (bytes, bytearray)):
        try:
            source = bytes(source).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(
                f"Invalid UTF-8 at byte {exc.start}: {exc.reason}"
            ) from exc
    return source.removeprefix(BOM)


def split_lines(text: str) -> list[str]:
    """Split text into physical lines, accepting \\n, \\r\\n and \\r endings."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def preprocess(source: str | bytes | Iterable[str]) -> Generator[ParsedLine, None, None]:
    """
    Yield the content lines of an ORT document.

    Lines are trimmed; blank lines and lines whose first non-whitespace
    character is '#' are dropped. A '#' anywhere else is content.

    Args:
        source: Document text, UTF-8 bytes, or an iterable of physical lines.

    Yields:
        ParsedLine objects carrying the original 1-based line numbers.
    """
    if isinstance(source, (str, bytes, bytearray)):
        lines: Iterable[str] = split_lines(decode_source(source))
    else:
        lines = _normalize_lines(source)

    for i, raw in enumerate(lines, start=1):
        content = strip_token(raw)
        if not content or content.startswith("#"):
            continue
        yield ParsedLine(line_number=i, content=content)


def _normalize_lines(lines: Iterable[str]) -> Generator[str, None, None]:
    """Split each item into physical lines and drop the leading BOM."""
    for i, line in enumerate(lines):
        if i == 0:
            line = line.removeprefix(BOM)
        # One trailing terminator ends the item; it does not open another line
        if line.endswith("\r\n"):
            line = line[:-2]
        elif line.endswith(("\n", "\r")):
            line = line[:-1]
        yield from split_lines(line)
