"""
Per-database filter capabilities.

A :class:`CapabilitySet` declares, for one compound database, which filter
kinds can be queried and the column each maps to.  Kinds depending on an
optional dataset (e.g. MS/MS spectra) are listed but flagged unavailable
when that dataset is missing.

The set is built once per database and never mutated; attaching a dataset
returns a new set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, NamedTuple

from pydantic import BaseModel, ConfigDict
from sqlalchemy import inspect

from .kinds import DEFAULT_KIND_REGISTRY, FilterKind, FilterKindRegistry

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

logger = logging.getLogger(__name__)


class Capability(BaseModel):
    """Whether a filter kind is queryable in a database, and on which column."""

    model_config = ConfigDict(frozen=True)

    kind: FilterKind
    column: str
    available: bool = True


class SupportedFilter(NamedTuple):
    """Row of :func:`list_supported_filters`."""

    kind: str
    column: str
    available: bool


class CapabilitySet(Mapping[FilterKind, Capability]):
    """Read-only mapping of :class:`FilterKind` to :class:`Capability`."""

    def __init__(
        self,
        capabilities: Iterable[Capability],
        *,
        datasets: Iterable[str] = (),
        registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
    ) -> None:
        self._entries: dict[FilterKind, Capability] = {
            cap.kind: cap for cap in capabilities
        }
        self._datasets = frozenset(datasets)
        self._registry = registry

    # -- Mapping -------------------------------------------------------------

    def __getitem__(self, kind: FilterKind) -> Capability:
        return self._entries[kind]

    def __iter__(self) -> Iterator[FilterKind]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        kinds = ", ".join(
            f"{k.value}{'' if c.available else ' (unavailable)'}"
            for k, c in self._entries.items()
        )
        return f"CapabilitySet({kinds})"

    # -- queries -------------------------------------------------------------

    @property
    def datasets(self) -> frozenset[str]:
        """Optional datasets present in the database."""
        return self._datasets

    def supports(self, kind: FilterKind) -> bool:
        """True if *kind* is declared and currently available."""
        cap = self._entries.get(kind)
        return cap is not None and cap.available

    def column(self, kind: FilterKind) -> str:
        """Return the column bound to *kind*.

        Raises:
            KeyError: If *kind* is not declared for this database.
        """
        return self._entries[kind].column

    def with_dataset(self, name: str) -> CapabilitySet:
        """
        Return a new set with dataset *name* attached.

        Declared kinds keep their columns; those requiring *name* become
        available.  No kind is added.
        """
        entries: list[Capability] = []
        for kind, cap in self._entries.items():
            descriptor = self._registry.get(kind)
            if descriptor is not None and descriptor.requires == name:
                cap = cap.model_copy(update={"available": True})
            entries.append(cap)
        return CapabilitySet(
            entries, datasets=self._datasets | {name}, registry=self._registry
        )


def build_capabilities(
    datasets: Iterable[str] = (),
    *,
    registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
) -> CapabilitySet:
    """
    Build the capabilities of a database holding the given optional *datasets*.

    Every registered kind is declared; kinds whose required dataset is not
    in *datasets* are marked unavailable.
    """
    present = frozenset(datasets)
    caps = [
        Capability(
            kind=descriptor.kind,
            column=descriptor.field,
            available=descriptor.requires is None or descriptor.requires in present,
        )
        for descriptor in registry
    ]
    return CapabilitySet(caps, datasets=present, registry=registry)


def capabilities(
    store: Engine | Connection,
    *,
    registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
) -> CapabilitySet:
    """
    Probe *store* for optional datasets and build its capabilities.

    Each dataset required by a registered kind is checked once by table
    presence.  This is the only point where filter handling touches the
    database.
    """
    required = sorted({d.requires for d in registry if d.requires is not None})
    inspector = inspect(store)
    present = [name for name in required if inspector.has_table(name)]
    logger.debug("Optional datasets present: %s (probed %s)", present, required)
    return build_capabilities(present, registry=registry)


def list_supported_filters(caps: CapabilitySet) -> list[SupportedFilter]:
    """Return ``(kind, column, available)`` rows sorted by kind name."""
    rows = [
        SupportedFilter(kind.value, cap.column, cap.available)
        for kind, cap in caps.items()
    ]
    return sorted(rows, key=lambda row: row.kind)
