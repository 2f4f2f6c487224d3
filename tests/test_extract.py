"""Tests for copying selections into pydantic records."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from jsonq.errors import (
    EmptySelectionError,
    ExtractionError,
    InvalidTargetError,
    MultipleResultsError,
    NotFoundError,
    QuerySyntaxError,
    TypeMismatchError,
    UnsupportedFieldTypeError,
)
from jsonq.extract import JsonQuery, extract, record_bindings


class Change(BaseModel):
    field: Annotated[str, JsonQuery("fieldId")]
    previous: Annotated[str, JsonQuery("?fromString")]
    current: Annotated[str, JsonQuery("?toString")]


class Counters(BaseModel):
    count: Annotated[int, JsonQuery("stats.count")]
    ratio: Annotated[float, JsonQuery("stats.ratio")]
    active: Annotated[bool, JsonQuery("stats.active")]
    note: str = "untouched"


class Defaults(BaseModel):
    label: Annotated[str, JsonQuery("?label")] = "n/a"
    size: Annotated[int, JsonQuery("?size")] = Field(default_factory=lambda: 7)
    maybe: Annotated[Optional[int], JsonQuery("?maybe")]
    flag: Annotated[bool, JsonQuery("?flag")]


class Nullable(BaseModel):
    resolution: Annotated[Optional[str], JsonQuery("resolution")]
    score: Annotated[int | None, JsonQuery("score")]


class Aliased(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Annotated[str, JsonQuery("?fromString"), Field(alias="from")]


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: Annotated[str, JsonQuery("key")]


class Bad(BaseModel):
    tags: Annotated[list[str], JsonQuery("tags")]


class BadQuery(BaseModel):
    key: Annotated[str, JsonQuery("key[")]


class FirstAssignee(BaseModel):
    item: Annotated[str, JsonQuery('names[kind=="assignee"]')] = ""


ITEM_A = {"fieldId": "status", "fromString": "Open", "toString": "Done"}
ITEM_B = {"fieldId": "assignee", "fromString": None, "toString": "Veijo Linux"}


# ── record_bindings ──────────────────────────────────────────────


class TestBindings:
    def test_declaration_order(self):
        names = [b.name for b in record_bindings(Counters)]
        assert names == ["count", "ratio", "active"]

    def test_kind_and_nullable(self):
        bindings = {b.name: b for b in record_bindings(Nullable)}
        assert bindings["resolution"].kind is str
        assert bindings["resolution"].nullable
        assert bindings["score"].kind is int
        assert bindings["score"].nullable

    def test_alias_is_key(self):
        (binding,) = record_bindings(Aliased)
        assert binding.key == "from"

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedFieldTypeError) as exc_info:
            record_bindings(Bad)
        assert exc_info.value.field == "tags"

    def test_bad_query(self):
        with pytest.raises(QuerySyntaxError):
            record_bindings(BadQuery)


# ── Single record ────────────────────────────────────────────────


class TestRecordClass:
    def test_new_instance(self):
        change = extract([ITEM_A], Change)
        assert change == Change(field="status", previous="Open", current="Done")

    def test_null_string_reads_as_empty(self):
        change = extract([ITEM_B], Change)
        assert change.previous == ""
        assert change.current == "Veijo Linux"

    def test_scalar_types(self):
        doc = {"stats": {"count": 3.9, "ratio": 2, "active": False}}
        counters = extract([doc], Counters)
        assert counters.count == 3
        assert counters.ratio == 2.0
        assert counters.active is False
        assert counters.note == "untouched"

    def test_empty_selection(self):
        with pytest.raises(EmptySelectionError, match="empty selection"):
            extract([], Change)

    def test_multiple_selection(self):
        with pytest.raises(MultipleResultsError, match="more than one"):
            extract([ITEM_A, ITEM_B], Change)

    def test_required_field_missing(self):
        with pytest.raises(NotFoundError, match="fieldId"):
            extract([{"toString": "x"}], Change)

    def test_type_mismatch(self):
        doc = {"stats": {"count": "three", "ratio": 1, "active": True}}
        with pytest.raises(TypeMismatchError, match="'stats.count' is not number"):
            extract([doc], Counters)

    def test_filtered_field_must_match_one(self):
        doc = {"names": [{"kind": "assignee"}, {"kind": "assignee"}]}
        with pytest.raises(MultipleResultsError):
            extract([doc], FirstAssignee)


class TestOptionalFields:
    def test_missing_uses_defaults(self):
        record = extract([{}], Defaults)
        assert record.label == "n/a"
        assert record.size == 7
        assert record.maybe is None
        assert record.flag is False

    def test_present_values_win(self):
        record = extract([{"label": "x", "size": 2, "maybe": 5, "flag": True}], Defaults)
        assert record == Defaults(label="x", size=2, maybe=5, flag=True)

    def test_optional_null_keeps_default_for_non_strings(self):
        record = extract([{"size": None, "flag": None}], Defaults)
        assert record.size == 7
        assert record.flag is False

    def test_optional_null_string_is_empty(self):
        record = extract([{"label": None}], Defaults)
        assert record.label == ""

    def test_optional_does_not_hide_type_mismatch(self):
        with pytest.raises(TypeMismatchError):
            extract([{"size": "big"}], Defaults)


class TestNullableFields:
    def test_null_is_none(self):
        record = extract([{"resolution": None, "score": None}], Nullable)
        assert record.resolution is None
        assert record.score is None

    def test_values(self):
        record = extract([{"resolution": "Fixed", "score": 4}], Nullable)
        assert record.resolution == "Fixed"
        assert record.score == 4

    def test_required_path_still_required(self):
        with pytest.raises(NotFoundError):
            extract([{"score": 1}], Nullable)


class TestAlias:
    def test_populated_through_alias(self):
        record = extract([ITEM_A], Aliased)
        assert record.from_ == "Open"


# ── Record instance ──────────────────────────────────────────────


class TestRecordInstance:
    def test_updated_in_place(self):
        change = Change(field="", previous="", current="")
        result = extract([ITEM_A], change)
        assert result is change
        assert change.current == "Done"

    def test_unbound_fields_untouched(self):
        counters = Counters(count=0, ratio=0.0, active=False, note="mine")
        extract([{"stats": {"count": 1, "ratio": 1.5, "active": True}}], counters)
        assert counters.note == "mine"
        assert counters.count == 1

    def test_nothing_assigned_on_failure(self):
        counters = Counters(count=9, ratio=9.0, active=True)
        doc = {"stats": {"count": 1, "ratio": "bad", "active": False}}
        with pytest.raises(TypeMismatchError):
            extract([doc], counters)
        assert counters.count == 9
        assert counters.active is True

    def test_frozen_instance(self):
        with pytest.raises(InvalidTargetError, match="frozen"):
            extract([{"key": "k"}], Frozen(key="x"))

    def test_frozen_class_is_fine(self):
        assert extract([{"key": "k"}], Frozen).key == "k"


# ── Sequences ────────────────────────────────────────────────────


class TestSequenceTargets:
    def test_list(self):
        records = extract([ITEM_A, ITEM_B], list[Change])
        assert [r.field for r in records] == ["status", "assignee"]
        assert isinstance(records, list)

    def test_sequence(self):
        records = extract([ITEM_B], Sequence[Change])
        assert records == [Change(field="assignee", previous="", current="Veijo Linux")]

    def test_tuple(self):
        records = extract([ITEM_A, ITEM_B], tuple[Change, ...])
        assert isinstance(records, tuple)
        assert len(records) == 2

    def test_empty_selection_is_empty_list(self):
        assert extract([], list[Change]) == []

    def test_one_failure_fails_all(self):
        with pytest.raises(NotFoundError):
            extract([ITEM_A, {"toString": "x"}], list[Change])


class TestInvalidTargets:
    @pytest.mark.parametrize(
        "target",
        [
            None,
            "Change",
            dict,
            list,
            list[int],
            dict[str, Change],
            tuple[Change, Change],
        ],
    )
    def test_rejected(self, target):
        with pytest.raises(InvalidTargetError):
            extract([ITEM_A], target)

    def test_list_instance_rejected(self):
        with pytest.raises(InvalidTargetError):
            extract([ITEM_A], [])


class TestValidation:
    def test_pydantic_errors_are_wrapped(self):
        class Positive(BaseModel):
            n: Annotated[int, JsonQuery("n"), Field(gt=0)]

        with pytest.raises(ExtractionError, match="Positive invalid"):
            extract([{"n": -1}], Positive)

    def test_instance_update_is_validated(self):
        class Positive(BaseModel):
            n: Annotated[int, JsonQuery("n"), Field(gt=0)]

        record = Positive(n=5)
        with pytest.raises(ExtractionError, match="Positive invalid"):
            extract([{"n": -3}], record)
        assert record.n == 5

    def test_instance_update_passes_validation(self):
        class Positive(BaseModel):
            n: Annotated[int, JsonQuery("n"), Field(gt=0)]

        record = Positive(n=5)
        assert extract([{"n": 7}], record).n == 7

    def test_frozen_bound_field_rejected_before_assignment(self):
        class Pinned(BaseModel):
            key: Annotated[str, JsonQuery("key")] = ""
            ref: Annotated[str, JsonQuery("ref"), Field(frozen=True)] = ""

        record = Pinned(key="old", ref="r1")
        with pytest.raises(InvalidTargetError, match=r"frozen fields are not writable: \['ref'\]"):
            extract([{"key": "new", "ref": "r2"}], record)
        assert record.key == "old"
        assert record.ref == "r1"
