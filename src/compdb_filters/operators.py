from __future__ import annotations

from enum import Enum

from .exceptions import InvalidCombinationError, InvalidOperatorError


class Operator(str, Enum):
    """Comparison operators a filter leaf may use."""

    # Standard comparison
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="

    # String patterns (text domain only)
    STARTSWITH = "startsWith"
    ENDSWITH = "endsWith"
    CONTAINS = "contains"

    @property
    def is_pattern(self) -> bool:
        return self in _PATTERN_OPERATORS


class LogicalOp(str, Enum):
    """Logical operators joining the children of a combination."""

    AND = "&"
    OR = "|"


_PATTERN_OPERATORS: frozenset[Operator] = frozenset(
    {Operator.STARTSWITH, Operator.ENDSWITH, Operator.CONTAINS}
)

# Map common spellings to Operator members
_OP_ALIASES: dict[str, Operator] = {
    "==": Operator.EQ,
    "=": Operator.EQ,
    "eq": Operator.EQ,
    "!=": Operator.NE,
    "ne": Operator.NE,
    ">": Operator.GT,
    "gt": Operator.GT,
    ">=": Operator.GE,
    "gte": Operator.GE,
    "ge": Operator.GE,
    "<": Operator.LT,
    "lt": Operator.LT,
    "<=": Operator.LE,
    "lte": Operator.LE,
    "le": Operator.LE,
    "startswith": Operator.STARTSWITH,
    "starts_with": Operator.STARTSWITH,
    "endswith": Operator.ENDSWITH,
    "ends_with": Operator.ENDSWITH,
    "contains": Operator.CONTAINS,
}

_LOGICAL_ALIASES: dict[str, LogicalOp] = {
    "&": LogicalOp.AND,
    "&&": LogicalOp.AND,
    "and": LogicalOp.AND,
    "|": LogicalOp.OR,
    "||": LogicalOp.OR,
    "or": LogicalOp.OR,
}

OPERATOR_TOKENS: frozenset[str] = frozenset(_OP_ALIASES)


def resolve_operator(op: Operator | str) -> Operator:
    """Return the ``Operator`` for a member or any accepted spelling."""
    if isinstance(op, Operator):
        return op
    found = _OP_ALIASES.get(str(op).strip().lower())
    if found is None:
        raise InvalidOperatorError(
            str(op),
            "unknown operator.",
            valid_operators=sorted(m.value for m in Operator),
        )
    return found


def resolve_logical_op(op: LogicalOp | str) -> LogicalOp:
    """Return the ``LogicalOp`` for a member or ``&``/``|``/``and``/``or``."""
    if isinstance(op, LogicalOp):
        return op
    found = _LOGICAL_ALIASES.get(str(op).strip().lower())
    if found is None:
        raise InvalidCombinationError.unknown_join(str(op))
    return found
