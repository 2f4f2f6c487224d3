"""Structured JSON logging for query evaluation.

Writes JSON-lines to disk so a failing query or extraction can be
debugged after the fact. Each log entry is a single JSON object on one
line. Nothing is written until configure_logging() attaches a handler.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger("jsonq")


def configure_logging(
    log_dir: str | Path, level: int = logging.DEBUG
) -> Path:
    """Set up jsonq logging to write JSON-lines to a file.

    Args:
        log_dir: Directory to write ``jsonq.log`` into.
        level: Logging level (default: DEBUG).

    Returns:
        Path of the log file.
    """
    log_path = Path(log_dir) / "jsonq.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(str(log_path))
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    _logger.addHandler(handler)
    _logger.setLevel(level)
    return log_path


def _log(event: dict[str, Any]) -> None:
    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug(json.dumps(event, default=str))


def log_query_parsed(query: str, steps: int, filters: int) -> None:
    _log({"event": "query_parsed", "query": query, "steps": steps, "filters": filters})


def log_select(query: str, input_count: int, output_count: int) -> None:
    _log({
        "event": "select",
        "query": query,
        "input_count": input_count,
        "output_count": output_count,
    })


def log_extract(target: Any, records: int) -> None:
    _log({"event": "extract", "target": target, "records": records})


def log_error(query: str | None, error: Exception) -> None:
    _log({
        "event": "error",
        "query": query,
        "error_type": type(error).__name__,
        "error": str(error),
    })
