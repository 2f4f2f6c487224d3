"""Copy selected JSON values into pydantic record models.

Record fields are bound to queries with ``Annotated`` metadata::

    class Assignment(BaseModel):
        from_: Annotated[str, JsonQuery("?fromString")]
        to: Annotated[str, JsonQuery("?toString")]

The bindings are read from ``model_fields`` when extraction starts, so
no attribute walking happens on the instances themselves. Fields without
a JsonQuery are left to their pydantic defaults.
"""

from __future__ import annotations

import types
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from jsonq.errors import (
    EmptySelectionError,
    ExtractionError,
    InvalidTargetError,
    MultipleResultsError,
    OptionalMissing,
    UnsupportedFieldTypeError,
)
from jsonq.getters import resolve_one
from jsonq.nodes import PathStep
from jsonq.parser import parse_path
from jsonq.values import as_boolean, as_integer, as_number, as_string

_CONVERTERS = {
    str: as_string,
    int: as_integer,
    float: as_number,
    bool: as_boolean,
}


@dataclass(frozen=True)
class JsonQuery:
    """Field annotation binding a record field to a query.

    A leading ``?`` makes the field optional: when the path is missing the
    field keeps its default (or the type's zero value).
    """

    query: str


@dataclass(frozen=True)
class FieldBinding:
    """A record field, the parsed query that fills it, and its scalar type."""

    name: str
    step: PathStep
    kind: type
    nullable: bool
    info: FieldInfo

    @property
    def key(self) -> str:
        return self.info.alias or self.name


def record_bindings(model: type[BaseModel]) -> list[FieldBinding]:
    """Collect the JsonQuery-annotated fields of *model*, in declaration order.

    Raises:
        UnsupportedFieldTypeError: If an annotated field is not a
            ``str``/``int``/``float``/``bool`` (optionally ``| None``).
        QuerySyntaxError: If a field's query does not parse.
    """
    bindings: list[FieldBinding] = []
    for name, info in model.model_fields.items():
        query = next((m for m in info.metadata if isinstance(m, JsonQuery)), None)
        if query is None:
            continue
        kind, nullable = _scalar_type(name, info.annotation)
        bindings.append(
            FieldBinding(
                name=name,
                step=parse_path(query.query),
                kind=kind,
                nullable=nullable,
                info=info,
            )
        )
    return bindings


def extract(selection: Sequence[Any], target: Any) -> Any:
    """Populate records from *selection*.

    Args:
        selection: Selected JSON values, usually a context's selection.
        target: One of
            - a record class: returns a new instance built from the single
              selected value;
            - a record instance: updated in place from the single selected
              value and returned. Nothing is assigned unless every field
              resolves and the updated record passes validation;
            - ``list[Record]``, ``Sequence[Record]`` or ``tuple[Record, ...]``:
              returns one record per selected value, in selection order.

    Raises:
        InvalidTargetError: If *target* is none of the shapes above, a
            frozen instance, or an instance with frozen bound fields.
        EmptySelectionError: If a single record is requested and nothing
            is selected.
        MultipleResultsError: If a single record is requested and more
            than one value is selected.
        ExtractionError: If pydantic rejects the assembled record.
    """
    if isinstance(target, BaseModel):
        model = type(target)
        if model.model_config.get("frozen"):
            raise InvalidTargetError(target, "frozen record is not writable")
        bindings = record_bindings(model)
        frozen = [b.name for b in bindings if b.info.frozen]
        if frozen:
            raise InvalidTargetError(target, f"frozen fields are not writable: {frozen}")
        values = _resolve_record(bindings, _single(selection))
        record = _validate(model, {**target.model_dump(by_alias=True), **values})
        for binding in bindings:
            setattr(target, binding.name, getattr(record, binding.name))
        return target

    if _is_record_type(target):
        bindings = record_bindings(target)
        return _build(target, bindings, _single(selection))

    model, container = _sequence_target(target)
    bindings = record_bindings(model)
    records = [_build(model, bindings, element) for element in selection]
    return tuple(records) if container is tuple else records


# ── Target inspection ────────────────────────────────────────────


def _is_record_type(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, BaseModel)


def _sequence_target(target: Any) -> tuple[type[BaseModel], type]:
    origin = get_origin(target)
    args = get_args(target)

    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        model = args[0]
    elif origin in (list, Sequence) and len(args) == 1:
        model = args[0]
    else:
        raise InvalidTargetError(target, "expected a record or a sequence of records")

    if not _is_record_type(model):
        raise InvalidTargetError(target, f"sequence items must be records, got {model!r}")
    return model, origin


def _scalar_type(name: str, annotation: Any) -> tuple[type, bool]:
    if annotation in _CONVERTERS:
        return annotation, False

    if get_origin(annotation) in (Union, types.UnionType):
        members = [a for a in get_args(annotation) if a is not type(None)]
        nullable = len(members) < len(get_args(annotation))
        if nullable and len(members) == 1 and members[0] in _CONVERTERS:
            return members[0], True

    raise UnsupportedFieldTypeError(name, annotation)


# ── Record population ────────────────────────────────────────────


def _single(selection: Sequence[Any]) -> Any:
    if not selection:
        raise EmptySelectionError("jsonq: empty selection")
    if len(selection) > 1:
        raise MultipleResultsError(
            "selection",
            len(selection),
            "jsonq: selection matches more than one item",
        )
    return selection[0]


def _build(model: type[BaseModel], bindings: list[FieldBinding], element: Any) -> BaseModel:
    return _validate(model, _resolve_record(bindings, element))


def _validate(model: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ExtractionError(f"jsonq: record {model.__name__} invalid: {e}") from e


def _resolve_record(bindings: list[FieldBinding], element: Any) -> dict[str, Any]:
    return {b.key: _resolve_field(b, element) for b in bindings}


def _resolve_field(binding: FieldBinding, element: Any) -> Any:
    try:
        raw = resolve_one(binding.step, element)
    except OptionalMissing:
        return _missing_value(binding)

    if raw is None:
        if binding.nullable:
            return None
        if binding.step.is_optional and binding.kind is not str:
            return _missing_value(binding)

    return _CONVERTERS[binding.kind](str(binding.step), raw)


def _missing_value(binding: FieldBinding) -> Any:
    if not binding.info.is_required():
        return binding.info.get_default(call_default_factory=True)
    if binding.nullable:
        return None
    return binding.kind()
