"""jsonq: path queries and typed extraction over decoded JSON values."""

from jsonq.context import SelectionContext, new_context
from jsonq.errors import (
    DocumentLoadError,
    EmptySelectionError,
    ExtractionError,
    InvalidTargetError,
    JsonqError,
    MultipleResultsError,
    NotFoundError,
    OptionalMissing,
    QuerySyntaxError,
    SpecLoadError,
    TypeMismatchError,
    UnsupportedFieldTypeError,
)
from jsonq.evaluator import evaluate, matches
from jsonq.extract import JsonQuery, extract
from jsonq.getters import get, get_boolean, get_integer, get_number, get_one, get_string
from jsonq.loader import build_record_model, load_document, load_extraction_spec
from jsonq.models import ExtractionResult, ExtractionSpec, FieldSpec
from jsonq.parser import parse_filter, parse_path
from jsonq.query_logger import configure_logging
from jsonq.runner import run_extraction
from jsonq.validator import (
    Diagnostic,
    Severity,
    ValidationResult,
    load_and_validate_spec,
    validate_query,
    validate_spec,
)

__all__ = [
    "build_record_model",
    "configure_logging",
    "Diagnostic",
    "evaluate",
    "extract",
    "get",
    "get_boolean",
    "get_integer",
    "get_number",
    "get_one",
    "get_string",
    "load_and_validate_spec",
    "load_document",
    "load_extraction_spec",
    "matches",
    "new_context",
    "parse_filter",
    "parse_path",
    "run_extraction",
    "Severity",
    "validate_query",
    "validate_spec",
    "ValidationResult",
    "DocumentLoadError",
    "EmptySelectionError",
    "ExtractionError",
    "ExtractionResult",
    "ExtractionSpec",
    "FieldSpec",
    "InvalidTargetError",
    "JsonQuery",
    "JsonqError",
    "MultipleResultsError",
    "NotFoundError",
    "OptionalMissing",
    "QuerySyntaxError",
    "SelectionContext",
    "SpecLoadError",
    "TypeMismatchError",
    "UnsupportedFieldTypeError",
]
