"""Type-safe getters over jsonq queries.

Each getter parses the query, evaluates it against the root value and
asserts the dynamic type of the single result. A leading ``?`` marks the
query optional: a missing key then yields the getter's zero value
instead of NotFoundError.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from jsonq.errors import MultipleResultsError, NotFoundError, OptionalMissing
from jsonq.evaluator import evaluate
from jsonq.nodes import PathStep
from jsonq.parser import parse_path
from jsonq.values import as_boolean, as_integer, as_number, as_string

T = TypeVar("T")


def get(value: Any, query: str) -> Any:
    """Evaluate *query* against *value* and return the raw result.

    Returns:
        The value at the path, or the list of filtered elements when the
        query ends in filters. None when an optional path is missing.

    Raises:
        QuerySyntaxError: If the query does not parse.
        NotFoundError: If a required key is missing.
        TypeMismatchError: If the path indexes through a non-object.
    """
    step = parse_path(query)
    try:
        return evaluate(step, value)
    except OptionalMissing:
        return None


def get_one(value: Any, query: str) -> Any:
    """Like ``get`` but a filtered result must hold exactly one element.

    Raises:
        NotFoundError: If the filters kept nothing.
        MultipleResultsError: If the filters kept more than one element.
    """
    step = parse_path(query)
    try:
        return resolve_one(step, value)
    except OptionalMissing:
        return None


def get_string(value: Any, query: str) -> str:
    """Return the string at *query*; ``null`` reads as ``""``."""
    return _get_typed(value, query, as_string, "")


def get_number(value: Any, query: str) -> float:
    return _get_typed(value, query, as_number, 0.0)


def get_integer(value: Any, query: str) -> int:
    """Return the number at *query* truncated toward zero."""
    return _get_typed(value, query, as_integer, 0)


def get_boolean(value: Any, query: str) -> bool:
    return _get_typed(value, query, as_boolean, False)


def resolve_one(step: PathStep, value: Any) -> Any:
    """Evaluate *step* and reduce the result to exactly one value.

    A filtered result that kept nothing counts as missing: OptionalMissing
    for ``?`` paths, NotFoundError otherwise.
    """
    result = evaluate(step, value)
    if not step.filters:
        return result
    if len(result) == 1:
        return result[0]
    if not result:
        if step.is_optional:
            raise OptionalMissing(str(step))
        raise NotFoundError(str(step))
    raise MultipleResultsError(str(step), len(result))


def _get_typed(
    value: Any, query: str, convert: Callable[[str, Any], T], zero: T
) -> T:
    step = parse_path(query)
    try:
        raw = resolve_one(step, value)
    except OptionalMissing:
        return zero
    if raw is None and step.is_optional:
        return zero
    return convert(str(step), raw)
