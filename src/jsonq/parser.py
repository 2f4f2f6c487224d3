"""Recursive-descent parser for jsonq queries.

Grammar::

    path         := ['?'] key ('.' key)* filter*
    key          := STRING
    filter       := '[' logical ']'
    logical      := comparative (('&&' | '||') comparative)*
    comparative  := atom [('==' | '!=' | '<' | '<=' | '>' | '>=') atom]
    atom         := STRING | INT

``&&`` and ``||`` share one precedence level and associate to the left.
"""

from __future__ import annotations

from dataclasses import replace

from jsonq import query_logger
from jsonq.errors import QuerySyntaxError
from jsonq.lexer import Lexer, Token, TokenType
from jsonq.nodes import Atom, Comparative, CompareOp, Filter, Logical, LogicalOp, PathStep

_COMPARE_OPS: dict[TokenType, CompareOp] = {
    TokenType.EQ: CompareOp.EQ,
    TokenType.NEQ: CompareOp.NEQ,
    TokenType.LT: CompareOp.LT,
    TokenType.LE: CompareOp.LE,
    TokenType.GT: CompareOp.GT,
    TokenType.GE: CompareOp.GE,
}

_LOGICAL_OPS: dict[TokenType, LogicalOp] = {
    TokenType.AND: LogicalOp.AND,
    TokenType.OR: LogicalOp.OR,
}


def parse_path(text: str) -> PathStep:
    """Parse a query string into a PathStep chain.

    Args:
        text: Query such as ``issue.fields.project.name`` or
            ``?changelog.items[fieldId=="assignee"][0]``.

    Returns:
        The terminal PathStep. Earlier keys are reachable through
        ``left`` back-links; filters are attached to the terminal step.

    Raises:
        QuerySyntaxError: If the text does not match the grammar.
    """
    lexer = Lexer(text)

    token = lexer.next_token()
    optional = False
    if token.type is TokenType.QUESTION:
        optional = True
        token = lexer.next_token()

    step = PathStep(key=_expect_key(lexer, token), optional=optional)

    while True:
        token = lexer.next_token()
        if token.type is not TokenType.DOT:
            lexer.unget(token)
            break
        step = PathStep(key=_expect_key(lexer, lexer.next_token()), left=step)

    filters: list[Filter] = []
    while True:
        token = lexer.next_token()
        if token.type is TokenType.EOF:
            break
        if token.type is not TokenType.LBRACKET:
            raise _unexpected(lexer, token)
        filters.append(parse_filter(lexer))

    if filters:
        step = replace(step, filters=tuple(filters))

    query_logger.log_query_parsed(text, len(step.steps()), len(filters))
    return step


def parse_filter(lexer: Lexer) -> Filter:
    """Parse one bracketed filter body, consuming its closing ``]``.

    The opening ``[`` must already have been consumed by the caller.
    """
    left = _parse_comparative(lexer)
    while True:
        token = lexer.next_token()
        if token.type is TokenType.RBRACKET:
            return left
        if token.type in _LOGICAL_OPS:
            right = _parse_comparative(lexer)
            left = Logical(op=_LOGICAL_OPS[token.type], left=left, right=right)
            continue
        raise _unexpected(lexer, token)


def _parse_comparative(lexer: Lexer) -> Comparative:
    left_token = lexer.next_token()
    left = _parse_atom(lexer, left_token)

    token = lexer.next_token()
    if token.type not in _COMPARE_OPS:
        lexer.unget(token)
        return Comparative(op=CompareOp.INDEX, left=left)

    if left.is_int:
        raise lexer.syntax_error(
            f"comparison needs a field name on the left, got {left_token.describe()}",
            left_token.position,
        )
    right = _parse_atom(lexer, lexer.next_token())
    return Comparative(op=_COMPARE_OPS[token.type], left=left, right=right)


def _parse_atom(lexer: Lexer, token: Token) -> Atom:
    if token.type in (TokenType.STRING, TokenType.INT):
        return Atom(token.value)  # type: ignore[arg-type]
    raise _unexpected(lexer, token)


def _expect_key(lexer: Lexer, token: Token) -> str:
    if token.type is not TokenType.STRING:
        raise lexer.syntax_error(
            f"expected a key, got {token.describe()}", token.position
        )
    return token.value  # type: ignore[return-value]


def _unexpected(lexer: Lexer, token: Token) -> QuerySyntaxError:
    return lexer.syntax_error(
        f"unexpected {token.describe()} at offset {token.position}", token.position
    )
