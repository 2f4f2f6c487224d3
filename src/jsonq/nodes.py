"""Expression tree for parsed queries.

A query is a chain of PathStep nodes linked right-to-left: the terminal
step holds a back-link to the step before it, down to the root step.
Filters are a closed union of Logical and Comparative nodes; the
evaluator dispatches on them with ``match``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class LogicalOp(str, Enum):
    AND = "&&"
    OR = "||"


class CompareOp(str, Enum):
    EQ = "=="
    NEQ = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    INDEX = ""  # bare atom: positional index


def _is_bare_key(key: str) -> bool:
    # Same character classes the lexer accepts for an unquoted symbol
    return (
        key[:1].isalpha()
        and all(c.isalpha() or c.isdigit() or c == "_" for c in key)
    )


def _format_key(key: str) -> str:
    if _is_bare_key(key):
        return key
    return f"\"{key}\""


@dataclass(frozen=True)
class Atom:
    """A literal inside a filter: a field name / string, or an integer."""

    value: str | int

    @property
    def is_int(self) -> bool:
        return isinstance(self.value, int)

    def __str__(self) -> str:
        if self.is_int:
            return str(self.value)
        return _format_key(self.value)


@dataclass(frozen=True)
class Logical:
    op: LogicalOp
    left: Filter
    right: Filter

    def __str__(self) -> str:
        return f"{self.left}{self.op.value}{self.right}"


@dataclass(frozen=True)
class Comparative:
    """Field comparison, or a positional index when ``op`` is INDEX.

    ``right`` is None exactly when ``op`` is INDEX.
    """

    op: CompareOp
    left: Atom
    right: Atom | None = None

    def __str__(self) -> str:
        if self.right is None:
            return str(self.left)
        right = str(self.right.value) if self.right.is_int else f"\"{self.right.value}\""
        return f"{self.left}{self.op.value}{right}"


Filter = Union[Logical, Comparative]


@dataclass(frozen=True)
class PathStep:
    """One dotted key selection, optionally followed by filters."""

    key: str
    left: PathStep | None = None
    optional: bool = False
    filters: tuple[Filter, ...] = field(default=())

    @property
    def root(self) -> PathStep:
        step = self
        while step.left is not None:
            step = step.left
        return step

    @property
    def is_optional(self) -> bool:
        """True when the query was written with a leading ``?``."""
        return self.root.optional

    def steps(self) -> list[PathStep]:
        """The chain from the root step to this one."""
        chain: list[PathStep] = []
        step: PathStep | None = self
        while step is not None:
            chain.append(step)
            step = step.left
        chain.reverse()
        return chain

    def path(self) -> str:
        """Dotted key path up to this step, without filters."""
        keys = ".".join(_format_key(s.key) for s in self.steps())
        return f"?{keys}" if self.is_optional else keys

    def __str__(self) -> str:
        return self.path() + "".join(f"[{f}]" for f in self.filters)
