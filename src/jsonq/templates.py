"""Jinja2 template rendering for extracted records.

Templates use {{ record.field }} syntax. StrictUndefined ensures
missing fields blow up immediately instead of silently rendering
empty strings.
"""

from __future__ import annotations

from typing import Any

import jinja2

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=False,
)


def render_template(template_str: str, record: dict[str, Any]) -> str:
    """Render a Jinja2 template string with a record available as ``record``.

    Args:
        template_str: Jinja2 template (e.g., "{{ record.key }}: {{ record.name }}").
        record: Field values accessible via ``{{ record.field }}``.

    Returns:
        Rendered string.

    Raises:
        jinja2.UndefinedError: If the template references a field that
            doesn't exist in *record*.
    """
    template = _ENV.from_string(template_str)
    return template.render(record=record)
