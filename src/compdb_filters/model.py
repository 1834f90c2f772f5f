"""
Filter leaves and predicate trees.

A predicate tree is either a :class:`FilterLeaf` or a :class:`Combination`
of child trees joined by logical operators.  Both are frozen pydantic
models: immutable once built, hashable, and structurally comparable.

Example::

    tree = combine(
        [
            build_leaf("by-compound-id", "==", "comp_a"),
            build_leaf("by-compound-name", "!=", "b"),
        ],
        ["|"],
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from .exceptions import InvalidCombinationError, InvalidOperatorError, ValueTypeError
from .kinds import DEFAULT_KIND_REGISTRY, Domain, FilterKind, FilterKindRegistry
from .operators import LogicalOp, Operator, resolve_logical_op, resolve_operator


class FilterNode(BaseModel):
    """Base class for predicate tree nodes with logic operator support."""

    model_config = ConfigDict(frozen=True)

    def __and__(self, other: PredicateTree) -> Combination:
        return _join(self, other, LogicalOp.AND)  # type: ignore[arg-type]

    def __or__(self, other: PredicateTree) -> Combination:
        return _join(self, other, LogicalOp.OR)  # type: ignore[arg-type]


class FilterLeaf(FilterNode):
    """
    A single condition on one filter kind.

    ``values`` is never empty and every value lies in the kind's domain.
    Pattern operators only apply to text kinds.  A leaf with more than one
    distinct value may only use equality or inequality; it is folded into
    a membership test on translation.
    """

    kind: FilterKind
    operator: Operator
    values: tuple[Any, ...]

    @model_validator(mode="after")
    def _check_shape(self) -> FilterLeaf:
        if not self.values:
            raise ValueTypeError(
                self.kind.value,
                self.values,
                "non-empty",
                f"Filter '{self.kind.value}' requires at least one value",
            )
        descriptor = DEFAULT_KIND_REGISTRY.descriptor(self.kind)
        if self.operator.is_pattern and descriptor.domain is Domain.NUMERIC:
            raise InvalidOperatorError(
                self.operator.value,
                "pattern operators require a text filter.",
                kind=self.kind.value,
            )
        for val in self.values:
            descriptor.check_value(val)
        if len(distinct_values(self.values)) > 1 and self.operator not in (
            Operator.EQ,
            Operator.NE,
        ):
            raise InvalidOperatorError(
                self.operator.value,
                "only '==' and '!=' accept multiple values.",
                kind=self.kind.value,
            )
        return self

    @property
    def value(self) -> Any:
        """The single value of the leaf, or the tuple of values."""
        return self.values[0] if len(self.values) == 1 else self.values

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "operator": self.operator.value,
            "values": list(self.values),
        }


class Combination(FilterNode):
    """
    Child trees joined left to right by ``joins``.

    ``joins[i]`` sits between ``children[i]`` and ``children[i + 1]``, so
    ``len(joins) == len(children) - 1``.  A single child is degenerate and
    behaves as that child.
    """

    children: tuple[FilterLeaf | Combination, ...]
    joins: tuple[LogicalOp, ...] = ()

    @model_validator(mode="after")
    def _check_arity(self) -> Combination:
        if not self.children or len(self.joins) != len(self.children) - 1:
            raise InvalidCombinationError.arity(len(self.children), len(self.joins))
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "children": [child.to_dict() for child in self.children],
            "joins": [join.value for join in self.joins],
        }


Combination.model_rebuild()

PredicateTree = FilterLeaf | Combination


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def build_leaf(
    kind: FilterKind | str,
    operator: Operator | str | None,
    values: Any,
    *,
    registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
) -> FilterLeaf:
    """
    Build a :class:`FilterLeaf`, checking values against the kind's domain.

    Args:
        kind: Filter kind or its string value (``"by-compound-id"``).
        operator: Operator, operator token, or ``None`` for the kind's
            default (``==`` for text kinds, ``>=``/``<=`` for the m/z
            range minimum/maximum).
        values: A single value or a sequence of values.
        registry: Registry holding the kind descriptors.

    Raises:
        ValueTypeError: A value does not match the kind's domain.
        InvalidOperatorError: The operator is unknown, a pattern operator
            is used on a numeric kind, or several values are given with
            an operator other than equality/inequality.
    """
    descriptor = registry.descriptor(kind)
    op = (
        descriptor.default_operator if operator is None else resolve_operator(operator)
    )
    return FilterLeaf(kind=descriptor.kind, operator=op, values=_as_tuple(values))


def combine(
    children: Sequence[PredicateTree],
    joins: Sequence[LogicalOp | str] | LogicalOp | str,
) -> Combination:
    """
    Combine child trees with logical operators.

    ``joins`` holds one operator per gap between children.  A single
    operator (not a sequence) is used for every gap.

    Raises:
        InvalidCombinationError: ``children`` is empty, the number of
            joins does not match, or a join token is unknown.
    """
    if isinstance(joins, LogicalOp | str):
        ops = [resolve_logical_op(joins)] * max(len(children) - 1, 0)
    else:
        ops = [resolve_logical_op(j) for j in joins]
    if not children or len(ops) != len(children) - 1:
        raise InvalidCombinationError.arity(len(children), len(ops))
    return Combination(children=tuple(children), joins=tuple(ops))


def filter_kinds(tree: PredicateTree) -> list[FilterKind]:
    """Return every kind in *tree*, depth-first in leaf order."""
    if isinstance(tree, FilterLeaf):
        return [tree.kind]
    kinds: list[FilterKind] = []
    for child in tree.children:
        kinds.extend(filter_kinds(child))
    return kinds


def distinct_values(values: Iterable[Any]) -> list[Any]:
    """Return *values* without duplicates, keeping first-seen order."""
    seen: list[Any] = []
    for val in values:
        if val not in seen:
            seen.append(val)
    return seen


# ---------------------------------------------------------------------------
# Per-kind constructors
# ---------------------------------------------------------------------------


def compound_id_filter(value: Any, condition: Operator | str = Operator.EQ) -> FilterLeaf:
    return build_leaf(FilterKind.COMPOUND_ID, condition, value)


def compound_name_filter(
    value: Any, condition: Operator | str = Operator.EQ
) -> FilterLeaf:
    return build_leaf(FilterKind.COMPOUND_NAME, condition, value)


def msms_mz_range_min_filter(
    value: Any, condition: Operator | str = Operator.GE
) -> FilterLeaf:
    """Filter on the smallest m/z of all peaks of an entry's MS/MS spectra."""
    return build_leaf(FilterKind.MSMS_MZ_RANGE_MIN, condition, value)


def msms_mz_range_max_filter(
    value: Any, condition: Operator | str = Operator.LE
) -> FilterLeaf:
    """Filter on the largest m/z of all peaks of an entry's MS/MS spectra."""
    return build_leaf(FilterKind.MSMS_MZ_RANGE_MAX, condition, value)


# -- internals ---------------------------------------------------------------


def _as_tuple(values: Any) -> tuple[Any, ...]:
    if isinstance(values, str) or not isinstance(values, Iterable):
        return (values,)
    return tuple(values)


def _join(left: PredicateTree, right: PredicateTree, op: LogicalOp) -> Combination:
    # Only extend a combination that uses ``op`` throughout; anything else
    # would change how the existing joins group.
    if isinstance(left, Combination) and all(j is op for j in left.joins):
        return Combination(children=(*left.children, right), joins=(*left.joins, op))
    return Combination(children=(left, right), joins=(op,))
