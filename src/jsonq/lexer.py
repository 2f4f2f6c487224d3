"""Query lexer.

Turns a query string such as ``items[fieldId=="assignee"][0]`` into a
stream of tokens, one at a time, with a single token of push-back so the
parser can look one token ahead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from jsonq.errors import QuerySyntaxError


class TokenType(Enum):
    """All token types in the query language."""

    # Delimiters
    DOT = auto()  # .
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    QUESTION = auto()  # ?

    # Logical operators
    AND = auto()  # &&
    OR = auto()  # ||

    # Comparison operators
    EQ = auto()  # ==
    NEQ = auto()  # !=
    LT = auto()  # <
    LE = auto()  # <=
    GT = auto()  # >
    GE = auto()  # >=

    # Literals
    STRING = auto()  # "quoted" or bare identifier
    INT = auto()  # 42

    EOF = auto()


SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    ".": TokenType.DOT,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "?": TokenType.QUESTION,
}

# First character -> (second character, two-char type, one-char fallback or None)
OPERATOR_TOKENS: dict[str, tuple[str, TokenType, TokenType | None]] = {
    "&": ("&", TokenType.AND, None),
    "|": ("|", TokenType.OR, None),
    "=": ("=", TokenType.EQ, None),
    "!": ("=", TokenType.NEQ, None),
    "<": ("=", TokenType.LE, TokenType.LT),
    ">": ("=", TokenType.GE, TokenType.GT),
}

TOKEN_TEXT: dict[TokenType, str] = {
    TokenType.DOT: ".",
    TokenType.LBRACKET: "[",
    TokenType.RBRACKET: "]",
    TokenType.QUESTION: "?",
    TokenType.AND: "&&",
    TokenType.OR: "||",
    TokenType.EQ: "==",
    TokenType.NEQ: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
}

_WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class Token:
    """A single token produced by the lexer."""

    type: TokenType
    value: str | int | None = None
    position: int = 0  # character offset in the query

    def describe(self) -> str:
        """Human-readable form used in syntax error messages."""
        if self.type is TokenType.EOF:
            return "end of query"
        if self.type is TokenType.STRING:
            return f"string {self.value!r}"
        if self.type is TokenType.INT:
            return f"integer {self.value}"
        return f"'{TOKEN_TEXT[self.type]}'"


class Lexer:
    """Tokenizer over a query string with explicit position tracking."""

    def __init__(self, query: str) -> None:
        self.query = query
        self.pos = 0
        self._pushed: Token | None = None

    def next_token(self) -> Token:
        """Return the next token, or an EOF token at the end of the query.

        Raises:
            QuerySyntaxError: On a character that starts no token, an
                unterminated string, or a malformed numeral.
        """
        if self._pushed is not None:
            token, self._pushed = self._pushed, None
            return token

        self._skip_whitespace()
        start = self.pos
        if start >= len(self.query):
            return Token(TokenType.EOF, position=start)

        ch = self.query[start]

        if ch in SINGLE_CHAR_TOKENS:
            self.pos += 1
            return Token(SINGLE_CHAR_TOKENS[ch], position=start)

        if ch in OPERATOR_TOKENS:
            return self._read_operator(ch, start)

        if ch == '"':
            return self._read_string(start)

        if ch.isalpha():
            return self._read_symbol(start)

        if ch.isdigit():
            return self._read_int(start)

        raise self.syntax_error(f"unexpected character {ch!r}", start)

    def unget(self, token: Token) -> None:
        """Push a token back so the next ``next_token`` returns it again."""
        if self._pushed is not None:
            raise RuntimeError("lexer supports a single token of push-back")
        self._pushed = token

    def syntax_error(self, reason: str, position: int | None = None) -> QuerySyntaxError:
        """Build a QuerySyntaxError at *position* (default: current offset)."""
        if position is None:
            position = self.pos
        return QuerySyntaxError(self.query, position, reason)

    # ── Token readers ──────────────────────────────────────────────

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.query) and self.query[self.pos] in _WHITESPACE:
            self.pos += 1

    def _read_operator(self, ch: str, start: int) -> Token:
        second, double, single = OPERATOR_TOKENS[ch]
        if self.query[start + 1 : start + 2] == second:
            self.pos = start + 2
            return Token(double, position=start)
        if single is None:
            self.pos = start + 1
            raise self.syntax_error(f"expected '{ch}{second}'", start)
        self.pos = start + 1
        return Token(single, position=start)

    def _read_string(self, start: int) -> Token:
        # No escape processing: a backslash is kept as-is.
        end = self.query.find('"', start + 1)
        if end < 0:
            self.pos = len(self.query)
            raise self.syntax_error("unterminated string", start)
        self.pos = end + 1
        return Token(TokenType.STRING, self.query[start + 1 : end], start)

    def _read_symbol(self, start: int) -> Token:
        end = start + 1
        while end < len(self.query):
            c = self.query[end]
            if not (c.isalpha() or c.isdigit() or c == "_"):
                break
            end += 1
        self.pos = end
        return Token(TokenType.STRING, self.query[start:end], start)

    def _read_int(self, start: int) -> Token:
        end = start + 1
        while end < len(self.query) and self.query[end].isdigit():
            end += 1
        self.pos = end
        text = self.query[start:end]
        try:
            value = int(text)
        except ValueError:
            raise self.syntax_error(f"malformed number {text!r}", start) from None
        return Token(TokenType.INT, value, start)
