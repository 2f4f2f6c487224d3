"""Selection context for chained queries.

Holds the values currently in focus and narrows them with select().
The first error latches: later select() calls do nothing and extract()
re-raises it, so a chain can be written without checking each step.
"""

from __future__ import annotations

from typing import Any

from jsonq import query_logger
from jsonq.errors import JsonqError, OptionalMissing
from jsonq.evaluator import matches
from jsonq.extract import extract
from jsonq.parser import parse_path


class SelectionContext:
    """Mutable selection over one root JSON value.

    Not thread-safe: the selection and the latched error are updated in
    place. The root value itself is only read.
    """

    def __init__(self, root: Any) -> None:
        self._selection: list[Any] = [root]
        self._error: JsonqError | None = None

    @property
    def selection(self) -> list[Any]:
        """A copy of the values currently selected."""
        return list(self._selection)

    @property
    def error(self) -> JsonqError | None:
        """The latched error, if any."""
        return self._error

    @property
    def ok(self) -> bool:
        return self._error is None

    def select(self, query: str) -> SelectionContext:
        """Replace the selection with the matches of *query* on each value.

        Results are concatenated in selection order. Values where an
        optional (``?``) path is missing contribute nothing.
        """
        if self._error is not None:
            return self

        try:
            step = parse_path(query)
            result: list[Any] = []
            for value in self._selection:
                try:
                    result.extend(matches(step, value))
                except OptionalMissing:
                    continue
        except JsonqError as e:
            query_logger.log_error(query, e)
            self._error = e
            return self

        query_logger.log_select(query, len(self._selection), len(result))
        self._selection = result
        return self

    def extract(self, target: Any) -> Any:
        """Copy the selection into *target*. See ``jsonq.extract.extract``.

        Raises:
            JsonqError: The latched error from an earlier select(), or any
                extraction error.
        """
        if self._error is not None:
            raise self._error

        try:
            result = extract(self._selection, target)
        except JsonqError as e:
            query_logger.log_error(None, e)
            raise

        records = len(result) if isinstance(result, (list, tuple)) else 1
        query_logger.log_extract(target, records)
        return result


def new_context(root: Any) -> SelectionContext:
    """Create a selection context whose selection is ``[root]``."""
    return SelectionContext(root)
