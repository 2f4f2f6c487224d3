"""Loading of extraction specs and query documents.

Specs are YAML validated through Pydantic. Documents are JSON, or YAML
when the file extension says so; decoding is left to ``json`` and
``yaml.safe_load``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, create_model
from pydantic import ValidationError as PydanticValidationError

from jsonq.errors import DocumentLoadError, SpecLoadError
from jsonq.extract import JsonQuery
from jsonq.models import ExtractionSpec, FieldSpec

_PYTHON_TYPES: dict[str, type] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": bool,
}

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_extraction_spec(path: str | Path) -> ExtractionSpec:
    """Load an extraction spec from a YAML file.

    Parses YAML, then validates the structure via Pydantic.

    Raises:
        SpecLoadError: If the file doesn't exist, YAML is invalid,
            or the structure doesn't match the expected schema.
    """
    path = Path(path)
    if not path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise SpecLoadError(
            f"Spec YAML must be a mapping, got {type(raw).__name__}"
        )

    try:
        return ExtractionSpec.model_validate(raw)
    except PydanticValidationError as e:
        raise SpecLoadError(f"Spec structure invalid: {e}") from e


def load_document(path: str | Path) -> Any:
    """Read and decode the document to query.

    ``-`` reads JSON from stdin. ``.yaml``/``.yml`` files are read as YAML,
    everything else as JSON.

    Raises:
        DocumentLoadError: If the file is missing or cannot be decoded.
    """
    if str(path) == "-":
        try:
            return json.load(sys.stdin)
        except json.JSONDecodeError as e:
            raise DocumentLoadError(f"Invalid JSON on stdin: {e}") from e

    path = Path(path)
    if not path.is_file():
        raise DocumentLoadError(f"Document not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DocumentLoadError(f"Invalid YAML in {path}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(f"Invalid JSON in {path}: {e}") from e


def build_record_model(spec: ExtractionSpec, name: str = "Record") -> type[BaseModel]:
    """Create a pydantic record model whose fields carry the spec's queries."""
    definitions: dict[str, Any] = {
        field_name: _field_definition(field)
        for field_name, field in spec.fields.items()
    }
    return create_model(name, **definitions)


def _field_definition(field: FieldSpec) -> tuple[Any, Any]:
    python_type: Any = _PYTHON_TYPES[field.type]
    if field.nullable:
        python_type = python_type | None
    annotation = Annotated[python_type, JsonQuery(field.query)]

    # An explicit ``default: null`` still counts as a default
    if "default" in field.model_fields_set:
        return annotation, field.default
    return annotation, ...
