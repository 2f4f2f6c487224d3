"""Custom exception hierarchy for jsonq.

All exceptions inherit from JsonqError so callers can catch broadly
or narrowly as needed.
"""

from __future__ import annotations

from typing import Any


class JsonqError(Exception):
    """Base for all jsonq errors."""


class QuerySyntaxError(JsonqError):
    """Query text could not be tokenized or parsed.

    ``consumed`` is the part of the query read before the error and
    ``remaining`` is everything after it.
    """

    def __init__(self, query: str, position: int, reason: str = "") -> None:
        self.query = query
        self.position = position
        self.reason = reason
        if position <= 0:
            message = f"syntax error at the beginning of query '{query}'"
        else:
            message = f"syntax error: '{self.consumed}'..."
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    @property
    def consumed(self) -> str:
        return self.query[: self.position]

    @property
    def remaining(self) -> str:
        return self.query[self.position :]


class NotFoundError(JsonqError):
    """A required key is missing from the document."""

    def __init__(self, query: str, message: str | None = None) -> None:
        self.query = query
        super().__init__(message or f"jsonq: element '{query}' not found")


class OptionalMissing(JsonqError):
    """A key on a ``?`` path is missing.

    Not a user-facing failure: getters, the selection context and the
    extractor turn it into "no value".
    """

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"jsonq: optional element '{query}' missing")


class TypeMismatchError(JsonqError):
    """A value has the wrong JSON type for the requested operation."""

    def __init__(self, query: str, actual: str, message: str) -> None:
        self.query = query
        self.actual = actual
        super().__init__(message)


class MultipleResultsError(JsonqError):
    """A single value was required but the query matched several."""

    def __init__(self, query: str, count: int, message: str | None = None) -> None:
        self.query = query
        self.count = count
        super().__init__(message or f"jsonq: multiple results for '{query}' ({count})")


class ExtractionError(JsonqError):
    """Copying selected values into a record failed."""


class EmptySelectionError(ExtractionError):
    """Single-record extraction over an empty selection."""


class InvalidTargetError(ExtractionError):
    """The extraction target is not a record or a record sequence."""

    def __init__(self, target: Any, reason: str = "") -> None:
        self.target = target
        message = f"jsonq: extract({target!r})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedFieldTypeError(ExtractionError):
    """A record field has a type the extractor cannot populate."""

    def __init__(self, field: str, field_type: Any) -> None:
        self.field = field
        self.field_type = field_type
        super().__init__(
            f"jsonq: field '{field}' has unsupported type {field_type!r}"
        )


class SpecLoadError(JsonqError):
    """Extraction spec YAML parsing or structure validation failed."""


class DocumentLoadError(JsonqError):
    """The JSON/YAML document to query could not be read or decoded."""
