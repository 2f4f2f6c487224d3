"""Extraction runner: applies an ExtractionSpec to a document.

Builds the record model, runs the select chain, extracts the records
and renders them through the spec's template when it has one.
"""

from __future__ import annotations

import time
from typing import Any

import jinja2

from jsonq import query_logger
from jsonq.context import new_context
from jsonq.errors import ExtractionError
from jsonq.loader import build_record_model
from jsonq.models import ExtractionResult, ExtractionSpec
from jsonq.templates import render_template


def run_extraction(spec: ExtractionSpec, document: Any) -> ExtractionResult:
    """Run an extraction spec against a decoded document.

    1. Builds a pydantic record model from the spec's fields.
    2. Applies each ``select`` query in order to a fresh context.
    3. Extracts one record (or a list when ``many`` is set).
    4. Renders each record through ``template`` when present.

    Returns:
        ExtractionResult with the records as dicts, rendered lines and
        timing.

    Raises:
        JsonqError: Any query, selection or extraction failure.
        ExtractionError: If the template fails to render a record.
    """
    start = time.monotonic()

    model = build_record_model(spec)
    context = new_context(document)
    for query in spec.select:
        context.select(query)

    target: Any = list[model] if spec.many else model
    extracted = context.extract(target)
    records = [r.model_dump() for r in (extracted if spec.many else [extracted])]

    lines: list[str] | None = None
    if spec.template is not None:
        lines = []
        for record in records:
            try:
                lines.append(render_template(spec.template, record))
            except jinja2.TemplateError as e:
                query_logger.log_error(None, e)
                raise ExtractionError(f"Template failed for record {record}: {e}") from e

    duration_ms = (time.monotonic() - start) * 1000
    return ExtractionResult(records=records, lines=lines, duration_ms=duration_ms)
