"""Exceptions raised by the ORT parser and serializer."""

from __future__ import annotations


class ORTError(ValueError):
    """Base exception for ORT operations.

    Carries the 1-based line number and raw line text when known. Errors
    raised below the line level (values, tokens) are stamped with their
    location by the binder before they leave ``parse``.
    """

    def __init__(self, message: str, *, line_number: int | None = None, raw: str | None = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.raw = raw

    def locate(self, line_number: int, raw: str) -> ORTError:
        """Attach a location unless one is already set."""
        if self.line_number is None:
            self.line_number = line_number
            self.raw = raw
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class EncodingError(ORTError):
    """Input is not valid UTF-8."""


class MalformedHeaderError(ORTError):
    """Header colon structure, field names or parentheses are wrong."""


class DuplicateFieldError(ORTError):
    """A name appears twice among sibling fields or inline keys."""


class UnbalancedDelimiterError(ORTError):
    """Parentheses or brackets do not balance."""


class FieldCountMismatchError(ORTError):
    """A data line has a different number of values than its header."""

    def __init__(
        self,
        expected: int,
        actual: int,
        *,
        line_number: int | None = None,
        raw: str | None = None,
    ):
        super().__init__(
            f"Expected {expected} values, got {actual}", line_number=line_number, raw=raw
        )
        self.expected = expected
        self.actual = actual


class ArityMismatchError(ORTError):
    """A positional nested object has a different number of values than its schema."""

    def __init__(self, expected: int, actual: int, *, raw: str | None = None):
        super().__init__(f"Nested object expects {expected} values, got {actual}: {raw}")
        self.expected = expected
        self.actual = actual
        self.token = raw


class SchemaRequiredError(ORTError):
    """A parenthesized value has neither a bound schema nor inline keys."""


class ConflictingRootError(ORTError):
    """Sections disagree on the shape of the document root."""


class MaxDepthExceededError(ORTError):
    """Nesting goes deeper than the configured limit."""

    def __init__(self, limit: int):
        super().__init__(f"Maximum nesting depth of {limit} exceeded")
        self.limit = limit


class MalformedSectionError(ORTError):
    """A section's data lines do not fit its header form."""
