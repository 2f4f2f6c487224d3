"""Pydantic models for extraction specs and results.

All data structures live here. No business logic, just shapes.
An extraction spec is the YAML form of a select chain plus a record
shape, so extractions can be run from the command line.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


FieldType = Literal["string", "number", "integer", "boolean"]


# ── Spec definitions ─────────────────────────────────────────────


class FieldSpec(BaseModel):
    query: str
    type: FieldType = "string"
    nullable: bool = False
    default: Any = None


class ExtractionSpec(BaseModel):
    select: list[str] = Field(default_factory=list)
    many: bool = False
    fields: dict[str, FieldSpec] = Field(min_length=1)
    template: str | None = None

    @field_validator("select", mode="before")
    @classmethod
    def _single_select(cls, value: Any) -> Any:
        # ``select: a.b`` is shorthand for a one-query chain
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("fields", mode="before")
    @classmethod
    def _shorthand_fields(cls, value: Any) -> Any:
        # ``name: "issue.key"`` is shorthand for a string field
        if isinstance(value, dict):
            return {
                name: {"query": spec} if isinstance(spec, str) else spec
                for name, spec in value.items()
            }
        return value


# ── Runtime results ──────────────────────────────────────────────


class ExtractionResult(BaseModel):
    records: list[dict[str, Any]]
    lines: list[str] | None = None
    duration_ms: float
