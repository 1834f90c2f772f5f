"""
Compile a validated predicate tree into a SQL condition fragment.

The fragment has no leading ``where``; callers add it when building the
query::

    validated = validate(parse('compound_id == "a" | compound_name != "b"'), caps)
    translate(validated)
    # → "(compound_id = 'a' or compound_name != 'b')"

Leaves compile to ``column operator value``:

- several distinct values fold ``==``/``!=`` into ``in``/``not in`` with a
  parenthesised value list,
- ``startsWith``/``endsWith``/``contains`` become ``like`` with the
  wildcard appended, prepended or both,
- text values are single-quoted with inner quotes doubled.

Combinations join their compiled children with ``and``/``or`` in order
and wrap the result in one pair of parentheses when there is more than
one child.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .escaping import escape_like, quote_text, render_list, render_literal
from .exceptions import TranslationError
from .model import FilterLeaf, distinct_values
from .operators import LogicalOp, Operator
from .validator import ValidatedPredicateTree

if TYPE_CHECKING:
    from .capabilities import CapabilitySet
    from .model import Combination, PredicateTree

logger = logging.getLogger(__name__)

SQL_LOGICAL_OPS: dict[LogicalOp, str] = {
    LogicalOp.AND: "and",
    LogicalOp.OR: "or",
}

_SQL_COMPARISON: dict[Operator, str] = {
    Operator.EQ: "=",
    Operator.NE: "!=",
    Operator.GT: ">",
    Operator.GE: ">=",
    Operator.LT: "<",
    Operator.LE: "<=",
}


@dataclass(frozen=True)
class TranslatorOptions:
    """
    Rendering options for :func:`translate`.

    Attributes:
        wildcard: Multi-character wildcard of the pattern-match operator.
        escape_wildcards: If ``True``, wildcard characters occurring in a
            pattern value are escaped with ``escape_char`` and an
            ``escape`` clause is added.  Off by default: values are
            wrapped as given, so a ``%`` or ``_`` in the value still acts
            as a wildcard.
        escape_char: Escape character used when ``escape_wildcards`` is set.
    """

    wildcard: str = "%"
    escape_wildcards: bool = False
    escape_char: str = "\\"


DEFAULT_OPTIONS = TranslatorOptions()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def translate(
    validated: ValidatedPredicateTree,
    *,
    options: TranslatorOptions = DEFAULT_OPTIONS,
) -> str:
    """
    Compile *validated* into a single condition fragment.

    Raises:
        TranslationError: *validated* did not come from ``validate()`` or
            the tree is internally inconsistent.  No partial fragment is
            ever returned.
    """
    if not isinstance(validated, ValidatedPredicateTree):
        raise TranslationError(
            f"Only validated trees can be translated, got {type(validated).__name__}"
        )
    fragment = _compile_node(validated.tree, validated.capabilities, options)
    logger.debug("Compiled filter fragment: %s", fragment)
    return fragment


def sql_condition(leaf: FilterLeaf) -> str:
    """Return the SQL operator a leaf compiles to."""
    op = leaf.operator
    if len(distinct_values(leaf.values)) > 1:
        if op is Operator.EQ:
            return "in"
        if op is Operator.NE:
            return "not in"
        raise TranslationError(
            f"Operator '{op.value}' on filter '{leaf.kind.value}' cannot take "
            "multiple values"
        )
    if op.is_pattern:
        return "like"
    return _SQL_COMPARISON[op]


def sql_value(leaf: FilterLeaf, options: TranslatorOptions = DEFAULT_OPTIONS) -> str:
    """Render the value side of a leaf."""
    values = distinct_values(leaf.values)
    if len(values) > 1:
        return render_list(values)
    value = values[0]
    if not leaf.operator.is_pattern:
        return render_literal(value)

    text = str(value)
    if options.escape_wildcards:
        text = escape_like(text, "_" + options.wildcard, options.escape_char)
    wildcard = options.wildcard
    if leaf.operator is Operator.STARTSWITH:
        pattern = text + wildcard
    elif leaf.operator is Operator.ENDSWITH:
        pattern = wildcard + text
    else:
        pattern = wildcard + text + wildcard
    return quote_text(pattern)


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_node(
    tree: PredicateTree,
    caps: CapabilitySet,
    options: TranslatorOptions,
) -> str:
    if isinstance(tree, FilterLeaf):
        return _compile_leaf(tree, caps, options)
    return _compile_combination(tree, caps, options)


def _compile_leaf(
    leaf: FilterLeaf,
    caps: CapabilitySet,
    options: TranslatorOptions,
) -> str:
    try:
        column = caps.column(leaf.kind)
    except KeyError as err:
        raise TranslationError(
            f"Filter '{leaf.kind.value}' has no column in this database"
        ) from err
    fragment = f"{column} {sql_condition(leaf)} {sql_value(leaf, options)}"
    if leaf.operator.is_pattern and options.escape_wildcards:
        fragment += f" escape {quote_text(options.escape_char)}"
    return fragment


def _compile_combination(
    tree: Combination,
    caps: CapabilitySet,
    options: TranslatorOptions,
) -> str:
    parts = [_compile_node(child, caps, options) for child in tree.children]
    if len(parts) == 1:
        return parts[0]
    result = parts[0]
    for join, part in zip(tree.joins, parts[1:], strict=True):
        result = f"{result} {SQL_LOGICAL_OPS[join]} {part}"
    return f"({result})"
