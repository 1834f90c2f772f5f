"""
Filter exception hierarchy.

All exceptions inherit from ``FilterError`` and provide ``to_dict()``
for API-friendly error responses.  None of them derive from
``ValueError`` so they pass through pydantic validators unchanged.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence


class FilterError(Exception):
    """Base exception for all filter errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValueTypeError(FilterError):
    """A leaf's value disagrees with the declared domain of its kind."""

    def __init__(
        self,
        kind: str,
        value: Any,
        domain: str,
        message: str | None = None,
    ) -> None:
        self.kind = kind
        self.value = value
        self.domain = domain
        super().__init__(
            message
            or (
                f"Filter '{kind}' expects {domain} values, got {value!r} "
                f"({type(value).__name__})"
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALUE_TYPE_ERROR",
            "kind": self.kind,
            "value": repr(self.value),
            "domain": self.domain,
        }


class InvalidOperatorError(FilterError):
    """
    Operator is unknown or incompatible with the filter.

    Raised for pattern operators on numeric kinds and for multi-value
    leaves using anything other than equality or inequality.  Unknown
    operator tokens get fuzzy-matched suggestions.
    """

    def __init__(
        self,
        operator: str,
        reason: str,
        *,
        kind: str | None = None,
        valid_operators: Sequence[str] = (),
    ) -> None:
        self.operator = operator
        self.kind = kind
        self.reason = reason
        self.suggestions = get_close_matches(
            operator, list(valid_operators), n=3, cutoff=0.6
        )

        message = f"Invalid operator '{operator}'"
        if kind is not None:
            message += f" for filter '{kind}'"
        message += f": {reason}"
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_OPERATOR",
            "operator": self.operator,
            "kind": self.kind,
            "reason": self.reason,
            "suggestions": self.suggestions,
        }


class MalformedExpressionError(FilterError):
    """Textual or serialised filter expression could not be parsed."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        position: int | None = None,
        suggestions: Sequence[str] = (),
    ) -> None:
        self.message = message
        self.expression = expression
        self.position = position
        self.suggestions = list(suggestions)

        text = message
        if position is not None:
            text += f" (at position {position})"
        if self.suggestions:
            text += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "MALFORMED_EXPRESSION",
            "message": self.message,
            "expression": self.expression,
            "position": self.position,
            "suggestions": self.suggestions,
        }


class InvalidCombinationError(FilterError):
    """Children and logical operators of a combination do not line up."""

    def __init__(
        self,
        message: str,
        *,
        children: int | None = None,
        joins: int | None = None,
    ) -> None:
        self.children = children
        self.joins = joins
        super().__init__(message)

    @classmethod
    def arity(cls, children: int, joins: int) -> InvalidCombinationError:
        if children == 0:
            message = "Cannot combine an empty list of filters"
        else:
            message = (
                f"Combining {children} filter(s) requires {children - 1} "
                f"logical operator(s), got {joins}"
            )
        return cls(message, children=children, joins=joins)

    @classmethod
    def unknown_join(cls, token: str) -> InvalidCombinationError:
        return cls(f"Unknown logical operator '{token}', expected '&' or '|'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_COMBINATION",
            "message": str(self),
            "children": self.children,
            "joins": self.joins,
        }


class UnsupportedFilterError(FilterError):
    """
    One or more filter kinds are not supported by the target store.

    ``kinds`` lists every offending kind, not just the first one found.
    """

    def __init__(
        self,
        kinds: Sequence[str],
        *,
        unavailable: Sequence[str] = (),
    ) -> None:
        self.kinds = list(kinds)
        self.unavailable = [k for k in unavailable if k in self.kinds]

        message = f"Filter(s) {', '.join(self.kinds)} are not supported"
        if self.unavailable:
            message += (
                f"; {', '.join(self.unavailable)} require(s) a dataset "
                f"missing from this database"
            )
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_FILTER",
            "kinds": self.kinds,
            "unavailable": self.unavailable,
        }


class TranslationError(FilterError):
    """Internal consistency failure while compiling a validated tree."""
