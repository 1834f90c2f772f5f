"""Check predicate trees against the capabilities of a database."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .capabilities import CapabilitySet
from .exceptions import MalformedExpressionError, UnsupportedFilterError
from .model import Combination, FilterLeaf, PredicateTree, distinct_values, filter_kinds
from .parser import from_dict, parse

_VALIDATED = object()


@dataclass(frozen=True)
class ValidatedPredicateTree:
    """
    A predicate tree known to be supported by ``capabilities``.

    Only :func:`validate` creates instances; the translators refuse
    anything else.
    """

    tree: PredicateTree
    capabilities: CapabilitySet
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._token is not _VALIDATED:
            raise TypeError("ValidatedPredicateTree is created by validate()")


def validate(tree: PredicateTree, capabilities: CapabilitySet) -> ValidatedPredicateTree:
    """
    Check every filter kind in *tree* against *capabilities*.

    All kinds are checked before failing so the error names every
    unsupported kind, absent and unavailable alike.

    Raises:
        UnsupportedFilterError: One or more kinds are not supported.
    """
    offending: list[str] = []
    unavailable: list[str] = []
    for kind in distinct_values(filter_kinds(tree)):
        if capabilities.supports(kind):
            continue
        offending.append(kind.value)
        if kind in capabilities:
            unavailable.append(kind.value)
    if offending:
        raise UnsupportedFilterError(offending, unavailable=unavailable)
    return ValidatedPredicateTree(tree, capabilities, _VALIDATED)


def prepare(filter_: Any, capabilities: CapabilitySet) -> ValidatedPredicateTree:
    """
    Turn any accepted filter input into a validated tree.

    Accepts an expression string, a :class:`FilterLeaf` or
    :class:`Combination`, the ``to_dict()`` form of either, or an already
    validated tree (re-checked against *capabilities*).

    Raises:
        MalformedExpressionError: *filter_* is none of the accepted inputs
            or cannot be parsed.
        UnsupportedFilterError: The filter uses unsupported kinds.
    """
    if isinstance(filter_, ValidatedPredicateTree):
        if filter_.capabilities is capabilities:
            return filter_
        filter_ = filter_.tree
    if isinstance(filter_, str):
        filter_ = parse(filter_)
    elif isinstance(filter_, Mapping):
        filter_ = from_dict(filter_)
    if not isinstance(filter_, FilterLeaf | Combination):
        raise MalformedExpressionError(
            "'filter' has to be a filter, a combination of filters or a valid "
            f"filter expression, got {type(filter_).__name__}"
        )
    return validate(filter_, capabilities)
