"""
Filter kinds and their descriptors.

Every :class:`FilterKind` is bound to exactly one :class:`KindDescriptor`
holding its database field, value domain, default operator and the
optional dataset it depends on.  Descriptors are kept in a
:class:`FilterKindRegistry`; adding a kind means adding one enum member
and registering one descriptor.

Usage::

    descriptor = DEFAULT_KIND_REGISTRY.get(FilterKind.COMPOUND_ID)
    descriptor.field  # "compound_id"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import MalformedExpressionError, ValueTypeError
from .operators import Operator

if TYPE_CHECKING:
    from collections.abc import Iterator

MSMS_SPECTRUM = "msms_spectrum"


class FilterKind(str, Enum):
    """Closed set of filter kinds supported by compound databases."""

    COMPOUND_ID = "by-compound-id"
    COMPOUND_NAME = "by-compound-name"
    MSMS_MZ_RANGE_MAX = "by-msms-mz-max"
    MSMS_MZ_RANGE_MIN = "by-msms-mz-min"


class Domain(str, Enum):
    TEXT = "text"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class KindDescriptor:
    """
    Static description of a filter kind.

    Attributes:
        kind: The kind described.
        field: Database column the kind filters on.
        domain: Value domain, text or numeric.
        default_operator: Operator used when none is given.
        requires: Optional dataset (table) that must be present in a
            database for the kind to be available, ``None`` if always
            available.
    """

    kind: FilterKind
    field: str
    domain: Domain
    default_operator: Operator = Operator.EQ
    requires: str | None = None

    def check_value(self, value: Any) -> None:
        """Raise :class:`ValueTypeError` if *value* is outside the domain."""
        if self.domain is Domain.TEXT:
            if not isinstance(value, str):
                raise ValueTypeError(self.kind.value, value, self.domain.value)
            return
        # bool is an int subclass but never a valid m/z
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueTypeError(self.kind.value, value, self.domain.value)
        if not math.isfinite(value):
            raise ValueTypeError(self.kind.value, value, "finite numeric")


class FilterKindRegistry:
    """
    Registry of :class:`KindDescriptor` instances keyed by kind.

    Also indexes descriptors by field name for the expression parser.
    """

    def __init__(self) -> None:
        self._descriptors: dict[FilterKind, KindDescriptor] = {}
        self._by_field: dict[str, KindDescriptor] = {}

    # -- registration --------------------------------------------------------

    def register(self, descriptor: KindDescriptor) -> None:
        """Register a descriptor, replacing any previous one for its kind."""
        previous = self._descriptors.get(descriptor.kind)
        if previous is not None:
            self._by_field.pop(previous.field, None)
        self._descriptors[descriptor.kind] = descriptor
        self._by_field[descriptor.field] = descriptor

    def register_all(self, *descriptors: KindDescriptor) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    # -- look-up -------------------------------------------------------------

    def get(self, kind: FilterKind) -> KindDescriptor | None:
        return self._descriptors.get(kind)

    def has(self, kind: FilterKind) -> bool:
        return kind in self._descriptors

    def by_field(self, field: str) -> KindDescriptor | None:
        """Return the descriptor filtering on column *field*, or ``None``."""
        return self._by_field.get(field)

    def descriptor(self, kind: FilterKind | str) -> KindDescriptor:
        """
        Look up the descriptor for *kind*, accepting the kind's string value.

        Raises:
            MalformedExpressionError: If the kind is unknown or unregistered.
        """
        resolved = resolve_kind(kind)
        found = self._descriptors.get(resolved)
        if found is None:
            raise MalformedExpressionError(
                f"No descriptor registered for filter '{resolved.value}'"
            )
        return found

    @property
    def fields(self) -> list[str]:
        return sorted(self._by_field)

    def __iter__(self) -> Iterator[KindDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


def resolve_kind(kind: FilterKind | str) -> FilterKind:
    """Return the ``FilterKind`` for a member or its string value."""
    if isinstance(kind, FilterKind):
        return kind
    try:
        return FilterKind(kind)
    except ValueError as err:
        raise MalformedExpressionError(
            f"Unknown filter kind '{kind}'",
            suggestions=_close_kinds(str(kind)),
        ) from err


def _close_kinds(kind: str) -> list[str]:
    return get_close_matches(kind, [k.value for k in FilterKind], n=3, cutoff=0.6)


def build_default_kind_registry() -> FilterKindRegistry:
    """Create a registry holding the built-in compound database kinds."""
    registry = FilterKindRegistry()
    registry.register_all(
        KindDescriptor(FilterKind.COMPOUND_ID, "compound_id", Domain.TEXT),
        KindDescriptor(FilterKind.COMPOUND_NAME, "compound_name", Domain.TEXT),
        # MS/MS m/z ranges need spectra data in the database
        KindDescriptor(
            FilterKind.MSMS_MZ_RANGE_MIN,
            "msms_mz_range_min",
            Domain.NUMERIC,
            default_operator=Operator.GE,
            requires=MSMS_SPECTRUM,
        ),
        KindDescriptor(
            FilterKind.MSMS_MZ_RANGE_MAX,
            "msms_mz_range_max",
            Domain.NUMERIC,
            default_operator=Operator.LE,
            requires=MSMS_SPECTRUM,
        ),
    )
    return registry


DEFAULT_KIND_REGISTRY: FilterKindRegistry = build_default_kind_registry()
