"""Evaluate parsed queries against decoded JSON values.

Walks a PathStep chain key by key, then narrows the terminal value with
the step's filters. Filter nodes are dispatched with structural pattern
matching over the closed Logical | Comparative union.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from typing import Any

from jsonq.errors import NotFoundError, OptionalMissing, TypeMismatchError
from jsonq.nodes import Atom, Comparative, CompareOp, Filter, Logical, LogicalOp, PathStep
from jsonq.values import as_numeric, as_string, json_type

_COMPARATORS: dict[CompareOp, Callable[[Any, Any], bool]] = {
    CompareOp.EQ: operator.eq,
    CompareOp.NEQ: operator.ne,
    CompareOp.LT: operator.lt,
    CompareOp.LE: operator.le,
    CompareOp.GT: operator.gt,
    CompareOp.GE: operator.ge,
}


def evaluate(step: PathStep, value: Any) -> Any:
    """Evaluate a query against a JSON value.

    Args:
        step: Terminal step of a parsed query (see ``parse_path``).
        value: Decoded JSON value to query. Never mutated.

    Returns:
        The value at the path when the terminal step has no filters,
        otherwise the list of elements that survived every filter.

    Raises:
        TypeMismatchError: If a non-object is indexed by key, or a filter
            compares a field of the wrong type.
        NotFoundError: If a key is missing on a required path, or a
            filter references a field an element does not have.
        OptionalMissing: If a key is missing on a ``?`` path.
    """
    return _evaluate(step, value, step.is_optional)


def matches(step: PathStep, value: Any) -> list[Any]:
    """Evaluate a query and return the selected values as a flat list.

    Filtered results are already lists. An unfiltered array is expanded
    into its elements; any other value is a single match.
    """
    result = evaluate(step, value)
    if step.filters:
        return result
    if isinstance(result, (list, tuple)):
        return list(result)
    return [result]


def _evaluate(step: PathStep, value: Any, optional: bool) -> Any:
    if step.left is not None:
        value = _evaluate(step.left, value, optional)

    if not isinstance(value, Mapping):
        path = step.path()
        actual = json_type(value)
        raise TypeMismatchError(path, actual, f"jsonq: query '{path}' can't index {actual}")

    if step.key not in value:
        if optional:
            raise OptionalMissing(step.path())
        raise NotFoundError(step.path())
    child = value[step.key]

    if not step.filters:
        return child

    items = list(child) if isinstance(child, (list, tuple)) else [child]
    for flt in step.filters:
        items = [item for index, item in enumerate(items) if predicate(flt, index, item)]
    return items


def predicate(flt: Filter, index: int, element: Any) -> bool:
    """Decide whether *element*, at position *index*, passes *flt*.

    Both sides of a logical node are always evaluated, so a lookup
    failure on either side is reported for every element.
    """
    match flt:
        case Logical(op=LogicalOp.AND, left=left, right=right):
            lhs = predicate(left, index, element)
            rhs = predicate(right, index, element)
            return lhs and rhs
        case Logical(op=LogicalOp.OR, left=left, right=right):
            lhs = predicate(left, index, element)
            rhs = predicate(right, index, element)
            return lhs or rhs
        case Comparative(op=CompareOp.INDEX, left=atom):
            if not atom.is_int:
                raise TypeMismatchError(
                    str(atom), "string", f"jsonq: filter '[{flt}]' is not an index"
                )
            return index == atom.value
        case Comparative(op=op, left=left, right=Atom() as right):
            field = _field_value(left, element, right)
            return _COMPARATORS[op](field, right.value)
        case _:
            raise TypeError(f"unknown filter node: {flt!r}")


def _field_value(name: Atom, element: Any, literal: Atom) -> str | int | float:
    """Look up the field named by *name* on *element*.

    The field is read as a number for integer literals and as a string
    otherwise.
    """
    if name.is_int:
        raise TypeMismatchError(
            str(name), "number", f"jsonq: filter field '{name}' must be a name"
        )
    key = name.value
    if not isinstance(element, Mapping):
        actual = json_type(element)
        raise TypeMismatchError(
            key, actual, f"jsonq: filter field '{key}' can't index {actual}"
        )
    if key not in element:
        raise NotFoundError(key)
    if literal.is_int:
        return as_numeric(key, element[key])
    return as_string(key, element[key])
