"""Typed accessors for decoded JSON values.

Every accessor either returns the value as the requested Python type or
raises TypeMismatchError naming the query and the value's JSON type.
No accessor falls back to a silent default except ``as_string``, which
reads ``null`` as an empty string.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonq.errors import TypeMismatchError


def json_type(value: Any) -> str:
    """Return the JSON type name of a decoded value."""
    # bool MUST be checked before int: bool subclasses int in Python
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _mismatch(query: str, value: Any, kind: str) -> TypeMismatchError:
    actual = json_type(value)
    return TypeMismatchError(
        query, actual, f"jsonq: value of '{query}' is not {kind}: {actual}"
    )


def as_string(query: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise _mismatch(query, value, "string")


def as_numeric(query: str, value: Any) -> int | float:
    """Return a number unchanged, so ints compare exactly at any size."""
    if is_number(value):
        return value
    raise _mismatch(query, value, "number")


def as_number(query: str, value: Any) -> float:
    number = as_numeric(query, value)
    try:
        return float(number)
    except OverflowError:
        raise _unrepresentable(query, number, "a float") from None


def as_integer(query: str, value: Any) -> int:
    """Numbers are truncated toward zero."""
    number = as_numeric(query, value)
    try:
        return int(number)
    except (OverflowError, ValueError):
        raise _unrepresentable(query, number, "an integer") from None


def _unrepresentable(query: str, value: Any, kind: str) -> TypeMismatchError:
    return TypeMismatchError(
        query, "number", f"jsonq: value of '{query}' is not representable as {kind}: {value!r}"
    )


def as_boolean(query: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise _mismatch(query, value, "boolean")
