"""Tests for capability sets, store probing and the supported-filter listing."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import Column, Integer, MetaData, Table

from compdb_filters import (
    MSMS_SPECTRUM,
    Capability,
    CapabilitySet,
    Domain,
    FilterKind,
    FilterKindRegistry,
    KindDescriptor,
    SupportedFilter,
    build_capabilities,
    capabilities,
    list_supported_filters,
)


def test_default_capabilities_without_spectra(caps):
    assert caps.supports(FilterKind.COMPOUND_ID)
    assert caps.supports(FilterKind.COMPOUND_NAME)
    assert not caps.supports(FilterKind.MSMS_MZ_RANGE_MIN)
    assert not caps.supports(FilterKind.MSMS_MZ_RANGE_MAX)
    assert caps[FilterKind.MSMS_MZ_RANGE_MIN].available is False
    assert caps.column(FilterKind.COMPOUND_NAME) == "compound_name"
    assert len(caps) == 4


def test_capabilities_with_spectra(msms_caps):
    assert msms_caps.supports(FilterKind.MSMS_MZ_RANGE_MIN)
    assert msms_caps.column(FilterKind.MSMS_MZ_RANGE_MAX) == "msms_mz_range_max"
    assert msms_caps.datasets == frozenset({MSMS_SPECTRUM})


def test_with_dataset_returns_new_set(caps):
    extended = caps.with_dataset(MSMS_SPECTRUM)
    assert extended.supports(FilterKind.MSMS_MZ_RANGE_MAX)
    assert not caps.supports(FilterKind.MSMS_MZ_RANGE_MAX)


def test_with_dataset_keeps_declared_kinds_and_columns():
    custom = CapabilitySet(
        [
            Capability(kind=FilterKind.COMPOUND_ID, column="cmp.id"),
            Capability(
                kind=FilterKind.MSMS_MZ_RANGE_MIN,
                column="spec.mz_min",
                available=False,
            ),
        ]
    )
    extended = custom.with_dataset(MSMS_SPECTRUM)
    assert list(extended) == [FilterKind.COMPOUND_ID, FilterKind.MSMS_MZ_RANGE_MIN]
    assert extended.column(FilterKind.COMPOUND_ID) == "cmp.id"
    assert extended.column(FilterKind.MSMS_MZ_RANGE_MIN) == "spec.mz_min"
    assert extended.supports(FilterKind.MSMS_MZ_RANGE_MIN)
    assert not extended.supports(FilterKind.MSMS_MZ_RANGE_MAX)
    assert extended.datasets == frozenset({MSMS_SPECTRUM})
    assert not custom.supports(FilterKind.MSMS_MZ_RANGE_MIN)


def test_with_unrelated_dataset_changes_nothing(caps):
    extended = caps.with_dataset("synonym")
    assert list_supported_filters(extended) == list_supported_filters(caps)
    assert extended.datasets == frozenset({"synonym"})


def test_capability_is_immutable(caps):
    with pytest.raises(Exception):  # noqa: B017 - pydantic frozen instance error
        caps[FilterKind.COMPOUND_ID].available = False  # type: ignore[misc]


def test_list_supported_filters_sorted_by_kind(caps):
    assert list_supported_filters(caps) == [
        SupportedFilter("by-compound-id", "compound_id", True),
        SupportedFilter("by-compound-name", "compound_name", True),
        SupportedFilter("by-msms-mz-max", "msms_mz_range_max", False),
        SupportedFilter("by-msms-mz-min", "msms_mz_range_min", False),
    ]


def test_probe_store_without_spectra(engine):
    caps = capabilities(engine)
    assert caps.supports(FilterKind.COMPOUND_ID)
    assert not caps.supports(FilterKind.MSMS_MZ_RANGE_MIN)


def test_probe_store_with_spectra(engine, caplog):
    spectra = Table(MSMS_SPECTRUM, MetaData(), Column("spectrum_id", Integer))
    spectra.create(engine)
    with caplog.at_level(logging.DEBUG, logger="compdb_filters.capabilities"):
        caps = capabilities(engine)
    assert caps.supports(FilterKind.MSMS_MZ_RANGE_MIN)
    assert caps.supports(FilterKind.MSMS_MZ_RANGE_MAX)
    assert MSMS_SPECTRUM in caplog.text


def test_probe_accepts_connection(engine):
    with engine.connect() as conn:
        assert capabilities(conn).supports(FilterKind.COMPOUND_NAME)


def test_custom_registry():
    registry = FilterKindRegistry()
    registry.register(
        KindDescriptor(FilterKind.COMPOUND_NAME, "name", Domain.TEXT, requires="synonym")
    )
    caps = build_capabilities(registry=registry)
    assert list(caps) == [FilterKind.COMPOUND_NAME]
    assert caps.column(FilterKind.COMPOUND_NAME) == "name"
    assert not caps.supports(FilterKind.COMPOUND_NAME)
    assert caps.with_dataset("synonym").supports(FilterKind.COMPOUND_NAME)


def test_registry_replaces_field_index():
    registry = FilterKindRegistry()
    registry.register(KindDescriptor(FilterKind.COMPOUND_ID, "compound_id", Domain.TEXT))
    registry.register(KindDescriptor(FilterKind.COMPOUND_ID, "cid", Domain.TEXT))
    assert registry.by_field("compound_id") is None
    assert registry.by_field("cid").kind is FilterKind.COMPOUND_ID
    assert registry.fields == ["cid"]
