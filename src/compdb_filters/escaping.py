"""
SQL literal rendering.

All quoting and escaping of filter values happens here so the string
translator can later move to bound parameters without other changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

QUOTE = "'"


def quote_text(value: str) -> str:
    """Wrap *value* in single quotes, doubling any quote inside it."""
    return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE


def render_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def render_literal(value: Any) -> str:
    """Render one value: numbers unquoted, text quoted and escaped."""
    if isinstance(value, str):
        return quote_text(value)
    return render_number(value)


def render_list(values: Iterable[Any]) -> str:
    """Render values as a parenthesised, comma-joined list."""
    return "(" + ",".join(render_literal(v) for v in values) + ")"


def escape_like(value: str, wildcards: str = "%_", escape_char: str = "\\") -> str:
    """Escape *wildcards* (and the escape character) inside a LIKE value."""
    special = {escape_char, *wildcards}
    return "".join(escape_char + c if c in special else c for c in value)
