"""Static validator for queries and extraction specs.

Checks query syntax, filter shapes, record field names and templates
without evaluating anything against a document.
"""

from __future__ import annotations

import keyword
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import jinja2
from jinja2 import meta as jinja_meta
from jinja2 import nodes as jinja_nodes

from jsonq.errors import QuerySyntaxError
from jsonq.models import ExtractionSpec
from jsonq.nodes import Comparative, CompareOp, Filter, Logical, PathStep
from jsonq.parser import parse_path

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single validation finding."""

    severity: Severity
    location: str  # "query", "select[0]", "fields.key", "template"
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Aggregate result of validation."""

    diagnostics: list[Diagnostic]

    @property
    def ok(self) -> bool:
        """True when there are no error-severity diagnostics."""
        return not any(d.severity == Severity.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


# ---------------------------------------------------------------------------
# Jinja2 environment for template parsing (not rendering)
# ---------------------------------------------------------------------------

_JINJA_ENV = jinja2.Environment()

# ---------------------------------------------------------------------------
# 1. Query syntax and filter shapes
# ---------------------------------------------------------------------------


def _parse_query(text: str, location: str) -> tuple[PathStep | None, list[Diagnostic]]:
    """Try to parse a query. Return (step, diagnostics)."""
    try:
        return parse_path(text), []
    except QuerySyntaxError as e:
        return None, [
            Diagnostic(
                severity=Severity.ERROR,
                location=location,
                message=f"Invalid query {text!r}: {e}",
            )
        ]


def _iter_comparatives(flt: Filter) -> Iterator[Comparative]:
    match flt:
        case Logical(left=left, right=right):
            yield from _iter_comparatives(left)
            yield from _iter_comparatives(right)
        case Comparative():
            yield flt


def _check_filters(step: PathStep, location: str) -> list[Diagnostic]:
    """Flag index filters written with a name, e.g. ``items[name]``."""
    diagnostics: list[Diagnostic] = []
    for flt in step.filters:
        for comparative in _iter_comparatives(flt):
            if comparative.op is CompareOp.INDEX and not comparative.left.is_int:
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.ERROR,
                        location=location,
                        message=(
                            f"Filter '[{comparative}]' is neither a comparison "
                            f"nor an integer index"
                        ),
                    )
                )
    return diagnostics


def validate_query(text: str, location: str = "query") -> list[Diagnostic]:
    """Statically validate a single query string."""
    step, diagnostics = _parse_query(text, location)
    if step is not None:
        diagnostics.extend(_check_filters(step, location))
    return diagnostics


def _ends_with_index(step: PathStep) -> bool:
    # An unfiltered step may hold an array, which select() flattens
    if not step.filters:
        return False
    last = step.filters[-1]
    return isinstance(last, Comparative) and last.op is CompareOp.INDEX


# ---------------------------------------------------------------------------
# 2. Record field names
# ---------------------------------------------------------------------------


def _check_field_name(name: str) -> list[Diagnostic]:
    problem = None
    if not name.isidentifier():
        problem = "is not a valid identifier"
    elif keyword.iskeyword(name):
        problem = "is a Python keyword"
    elif name.startswith("_"):
        problem = "must not start with an underscore"
    elif name.startswith("model_"):
        problem = "must not start with 'model_' (reserved by pydantic)"

    if problem is None:
        return []
    return [
        Diagnostic(
            severity=Severity.ERROR,
            location=f"fields.{name}",
            message=f"Field name '{name}' {problem}",
        )
    ]


# ---------------------------------------------------------------------------
# 3. Jinja2 template syntax and record references
# ---------------------------------------------------------------------------


def _check_template(template: str, field_names: set[str]) -> list[Diagnostic]:
    """Parse the template and cross-check its ``record.*`` references."""
    try:
        ast = _JINJA_ENV.parse(template)
    except jinja2.TemplateSyntaxError as e:
        return [
            Diagnostic(
                severity=Severity.ERROR,
                location="template",
                message=f"Invalid Jinja2 template: {e}",
            )
        ]

    diagnostics: list[Diagnostic] = []

    for name in sorted(jinja_meta.find_undeclared_variables(ast) - {"record"}):
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                location="template",
                message=f"Template references '{name}'; only 'record' is available",
            )
        )

    referenced: set[str] = set()
    for node in ast.find_all(jinja_nodes.Getattr):
        if isinstance(node.node, jinja_nodes.Name) and node.node.name == "record":
            referenced.add(node.attr)
    for node in ast.find_all(jinja_nodes.Getitem):
        if (
            isinstance(node.node, jinja_nodes.Name)
            and node.node.name == "record"
            and isinstance(node.arg, jinja_nodes.Const)
        ):
            referenced.add(str(node.arg.value))

    for name in sorted(referenced - field_names):
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                location="template",
                message=(
                    f"Template references 'record.{name}' but the spec has no "
                    f"field '{name}'. Fields: {sorted(field_names)}"
                ),
            )
        )

    return diagnostics


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_spec(spec: ExtractionSpec) -> ValidationResult:
    """Statically validate an extraction spec without running it.

    Checks:
    - Query syntax of every select and field query
    - Index filters written with a name instead of an integer
    - Field names usable as pydantic model fields
    - Jinja2 template syntax and ``record.*`` references
    - Single-record specs whose select chain may match several values

    Returns a ``ValidationResult``. The spec is considered valid
    when ``result.ok`` is True (no error-severity diagnostics).
    """
    diagnostics: list[Diagnostic] = []

    last_step: PathStep | None = None
    for i, query in enumerate(spec.select):
        location = f"select[{i}]"
        step, parse_diags = _parse_query(query, location)
        diagnostics.extend(parse_diags)
        if step is not None:
            diagnostics.extend(_check_filters(step, location))
        last_step = step

    if not spec.many and last_step is not None and not _ends_with_index(last_step):
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                location=f"select[{len(spec.select) - 1}]",
                message=(
                    f"Single-record spec ends in '{last_step}', which may select several "
                    "values; add an index filter like [0] or set 'many: true'"
                ),
            )
        )

    for name, field in spec.fields.items():
        diagnostics.extend(_check_field_name(name))
        diagnostics.extend(validate_query(field.query, f"fields.{name}"))

    if spec.template is not None:
        diagnostics.extend(_check_template(spec.template, set(spec.fields)))

    return ValidationResult(diagnostics=diagnostics)


def load_and_validate_spec(
    path: str | Path,
) -> tuple[ExtractionSpec, ValidationResult]:
    """Load an extraction spec from YAML and validate it.

    Convenience wrapper: calls ``load_extraction_spec`` then ``validate_spec``.
    Raises ``SpecLoadError`` if YAML/Pydantic parsing fails.
    """
    from jsonq.loader import load_extraction_spec

    spec = load_extraction_spec(path)
    result = validate_spec(spec)
    return spec, result
