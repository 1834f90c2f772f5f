"""
Compile a validated predicate tree into a SQLAlchemy filter expression.

Selects the same rows as the fragment produced by
:func:`~compdb_filters.translator.translate`, but with bound parameters
instead of interpolated literals.  Logical joins follow SQL precedence
(``and`` binds tighter than ``or``), matching how a database reads the
flat ``a and b or c`` fragment.

Usage::

    stmt = select(compound).where(to_sqlalchemy(validated, compound))
"""

from __future__ import annotations

import operator as op_module
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, or_

from .exceptions import TranslationError
from .model import FilterLeaf, distinct_values
from .operators import LogicalOp, Operator
from .validator import ValidatedPredicateTree

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import ColumnElement

    from .capabilities import CapabilitySet
    from .model import Combination, PredicateTree

_COMPARISON: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: op_module.eq,
    Operator.NE: op_module.ne,
    Operator.GT: op_module.gt,
    Operator.GE: op_module.ge,
    Operator.LT: op_module.lt,
    Operator.LE: op_module.le,
}


def to_sqlalchemy(
    validated: ValidatedPredicateTree,
    table: Any,
    *,
    wildcard: str = "%",
) -> ColumnElement[bool]:
    """
    Build a SQLAlchemy boolean expression from a validated tree.

    Args:
        validated: Result of ``validate()``.
        table: A ``Table``/alias (columns looked up in ``table.c``) or a
            mapped class (columns looked up as attributes).
        wildcard: Multi-character wildcard for pattern operators.

    Raises:
        TranslationError: *validated* did not come from ``validate()`` or
            *table* lacks a column the tree needs.
    """
    if not isinstance(validated, ValidatedPredicateTree):
        raise TranslationError(
            f"Only validated trees can be compiled, got {type(validated).__name__}"
        )
    return _compile_node(validated.tree, validated.capabilities, table, wildcard)


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_node(
    tree: PredicateTree,
    caps: CapabilitySet,
    table: Any,
    wildcard: str,
) -> ColumnElement[bool]:
    if isinstance(tree, FilterLeaf):
        return _compile_leaf(tree, caps, table, wildcard)
    return _compile_combination(tree, caps, table, wildcard)


def _compile_combination(
    tree: Combination,
    caps: CapabilitySet,
    table: Any,
    wildcard: str,
) -> ColumnElement[bool]:
    exprs = [_compile_node(child, caps, table, wildcard) for child in tree.children]
    # Runs of AND-joined children form the terms of the OR
    groups: list[list[ColumnElement[bool]]] = [[exprs[0]]]
    for join, expr in zip(tree.joins, exprs[1:], strict=True):
        if join is LogicalOp.AND:
            groups[-1].append(expr)
        else:
            groups.append([expr])
    terms = [group[0] if len(group) == 1 else and_(*group) for group in groups]
    return terms[0] if len(terms) == 1 else or_(*terms)


def _compile_leaf(
    leaf: FilterLeaf,
    caps: CapabilitySet,
    table: Any,
    wildcard: str,
) -> ColumnElement[bool]:
    column = _resolve_column(table, caps.column(leaf.kind))
    values = distinct_values(leaf.values)
    op = leaf.operator

    if len(values) > 1:
        if op is Operator.EQ:
            return cast("ColumnElement[bool]", column.in_(values))
        if op is Operator.NE:
            return cast("ColumnElement[bool]", column.not_in(values))
        raise TranslationError(
            f"Operator '{op.value}' on filter '{leaf.kind.value}' cannot take "
            "multiple values"
        )

    value = values[0]
    if op is Operator.STARTSWITH:
        return cast("ColumnElement[bool]", column.like(f"{value}{wildcard}"))
    if op is Operator.ENDSWITH:
        return cast("ColumnElement[bool]", column.like(f"{wildcard}{value}"))
    if op is Operator.CONTAINS:
        return cast("ColumnElement[bool]", column.like(f"{wildcard}{value}{wildcard}"))
    return cast("ColumnElement[bool]", _COMPARISON[op](column, value))


def _resolve_column(table: Any, name: str) -> Any:
    columns = getattr(table, "c", None)
    column = columns.get(name) if columns is not None else getattr(table, name, None)
    if column is None:
        raise TranslationError(f"{table!r} has no column '{name}'")
    return column
