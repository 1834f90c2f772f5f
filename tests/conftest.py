"""Shared fixtures for compdb_filters tests."""

from __future__ import annotations

import pytest
from sqlalchemy import Column, Float, MetaData, String, Table, create_engine

from compdb_filters import MSMS_SPECTRUM, CapabilitySet, build_capabilities


@pytest.fixture
def caps() -> CapabilitySet:
    """Capabilities of a database without MS/MS spectra."""
    return build_capabilities()


@pytest.fixture
def msms_caps() -> CapabilitySet:
    """Capabilities of a database holding MS/MS spectra."""
    return build_capabilities([MSMS_SPECTRUM])


@pytest.fixture
def metadata() -> MetaData:
    return MetaData()


@pytest.fixture
def compound(metadata: MetaData) -> Table:
    return Table(
        "compound",
        metadata,
        Column("compound_id", String, primary_key=True),
        Column("compound_name", String),
        Column("msms_mz_range_min", Float),
        Column("msms_mz_range_max", Float),
    )


@pytest.fixture
def engine(metadata: MetaData, compound: Table):
    """In-memory SQLite database with a few compounds, no spectra table."""
    eng = create_engine("sqlite://")
    metadata.create_all(eng)
    with eng.begin() as conn:
        conn.execute(
            compound.insert(),
            [
                {
                    "compound_id": "comp_a",
                    "compound_name": "glucose",
                    "msms_mz_range_min": 50.0,
                    "msms_mz_range_max": 180.1,
                },
                {
                    "compound_id": "comp_b",
                    "compound_name": "glutamine",
                    "msms_mz_range_min": 30.5,
                    "msms_mz_range_max": 147.2,
                },
                {
                    "compound_id": "comp_c",
                    "compound_name": "O'Brien's acid",
                    "msms_mz_range_min": 120.0,
                    "msms_mz_range_max": 310.0,
                },
                {
                    "compound_id": "comp_d",
                    "compound_name": "100%_pure",
                    "msms_mz_range_min": 10.0,
                    "msms_mz_range_max": 99.9,
                },
            ],
        )
    yield eng
    eng.dispose()
