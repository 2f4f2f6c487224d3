"""Tests for the path and filter parser."""

from __future__ import annotations

import pytest

from jsonq.errors import QuerySyntaxError
from jsonq.lexer import Lexer, TokenType
from jsonq.nodes import Atom, Comparative, CompareOp, Logical, LogicalOp, PathStep
from jsonq.parser import parse_filter, parse_path


# ── Paths ────────────────────────────────────────────────────────


def test_single_key():
    step = parse_path("issue")
    assert step == PathStep(key="issue")


def test_dotted_chain_links_left():
    step = parse_path("issue.fields.project")
    assert step.key == "project"
    assert step.left.key == "fields"
    assert step.left.left.key == "issue"
    assert step.left.left.left is None
    assert [s.key for s in step.steps()] == ["issue", "fields", "project"]


def test_quoted_keys():
    step = parse_path('"customfield-1"."a b"')
    assert [s.key for s in step.steps()] == ["customfield-1", "a b"]


def test_optional_prefix_marks_root_only():
    step = parse_path("?fromString")
    assert step.optional
    assert step.is_optional

    chained = parse_path("?a.b.c")
    assert chained.root.optional
    assert not chained.optional
    assert chained.is_optional


def test_optional_not_allowed_after_first_key():
    with pytest.raises(QuerySyntaxError, match="expected a key"):
        parse_path("a.?b")


def test_empty_query():
    with pytest.raises(QuerySyntaxError, match="at the beginning"):
        parse_path("")


def test_integer_key_rejected():
    with pytest.raises(QuerySyntaxError, match="expected a key, got integer 0"):
        parse_path("items.0")


def test_trailing_dot():
    with pytest.raises(QuerySyntaxError, match="end of query"):
        parse_path("a.")


def test_garbage_after_path():
    with pytest.raises(QuerySyntaxError) as exc_info:
        parse_path("a b")
    assert exc_info.value.position == 2
    assert "unexpected string 'b' at offset 2" in str(exc_info.value)


# ── Filters attached to the path ─────────────────────────────────


def test_filters_attach_to_terminal_step():
    step = parse_path('issue.changelog.items[fieldId=="assignee"][0]')
    assert step.key == "items"
    assert step.filters == (
        Comparative(CompareOp.EQ, Atom("fieldId"), Atom("assignee")),
        Comparative(CompareOp.INDEX, Atom(0)),
    )
    assert step.left.filters == ()


def test_filter_must_follow_keys():
    with pytest.raises(QuerySyntaxError):
        parse_path("items[0].name")


def test_unclosed_filter():
    with pytest.raises(QuerySyntaxError, match="end of query"):
        parse_path("items[0")


def test_empty_filter():
    with pytest.raises(QuerySyntaxError, match="unexpected ']'"):
        parse_path("items[]")


@pytest.mark.parametrize(
    ("text", "op"),
    [
        ('k=="x"', CompareOp.EQ),
        ('k!="x"', CompareOp.NEQ),
        ("k<5", CompareOp.LT),
        ("k<=5", CompareOp.LE),
        ("k>5", CompareOp.GT),
        ("k>=5", CompareOp.GE),
    ],
)
def test_comparison_operators(text, op):
    (flt,) = parse_path(f"items[{text}]").filters
    assert isinstance(flt, Comparative)
    assert flt.op is op
    assert flt.left == Atom("k")


def test_bare_identifier_on_right_is_string_literal():
    (flt,) = parse_path("items[state==open]").filters
    assert flt.right == Atom("open")
    assert not flt.right.is_int


def test_integer_on_left_of_comparison_rejected():
    with pytest.raises(QuerySyntaxError, match="field name on the left"):
        parse_path('items[0=="x"]')


def test_name_as_index_parses():
    # Rejected at evaluation time, not parse time
    (flt,) = parse_path("items[name]").filters
    assert flt == Comparative(CompareOp.INDEX, Atom("name"))


# ── Logical operators ────────────────────────────────────────────


def test_and():
    (flt,) = parse_path('items[a=="x" && b==1]').filters
    assert flt == Logical(
        LogicalOp.AND,
        Comparative(CompareOp.EQ, Atom("a"), Atom("x")),
        Comparative(CompareOp.EQ, Atom("b"), Atom(1)),
    )


def test_logical_is_left_associative_without_precedence():
    (flt,) = parse_path("items[a==1 || b==2 && c==3]").filters
    assert isinstance(flt, Logical)
    assert flt.op is LogicalOp.AND
    assert isinstance(flt.left, Logical)
    assert flt.left.op is LogicalOp.OR
    assert flt.right == Comparative(CompareOp.EQ, Atom("c"), Atom(3))


def test_dangling_logical_operator():
    with pytest.raises(QuerySyntaxError):
        parse_path("items[a==1 &&]")


# ── parse_filter directly ────────────────────────────────────────


def test_parse_filter_consumes_one_closing_bracket():
    lexer = Lexer("k<3][0]")
    flt = parse_filter(lexer)
    assert flt == Comparative(CompareOp.LT, Atom("k"), Atom(3))
    assert lexer.next_token().type is TokenType.LBRACKET


# ── Rendering ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "query",
    [
        "issue.key",
        "?fromString",
        'items[fieldId=="assignee"][0]',
        '"a-b".c[k<=10&&j!="x y"]',
    ],
)
def test_str_round_trips_through_parser(query):
    step = parse_path(query)
    assert parse_path(str(step)) == step


def test_path_without_filters():
    assert parse_path('a.b[k=="x"]').path() == "a.b"
