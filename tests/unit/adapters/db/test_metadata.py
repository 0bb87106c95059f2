"""Tests for SQLAlchemy naming conventions applied via `metadata`.

These tests verify that the configured naming_convention in
`slotwise.adapters.db.metadata` generates predictable, stable names
for indexes, unique constraints, and check constraints.

Probe tables live on a throwaway `MetaData` sharing the convention, so the
application metadata (and every database built from it) stays untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import (
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    inspect,
)

from slotwise.adapters.db.metadata import metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=magic-value-comparison
# pylint: disable=redefined-outer-name


@pytest.fixture
def conventions_metadata() -> MetaData:
    """Empty metadata carrying the application naming convention."""
    return MetaData(naming_convention=dict(metadata.naming_convention))


def test_index_naming_convention_for_single_and_multi_cols(
    sqlite_engine_memory: Engine, conventions_metadata: MetaData
):
    """Unnamed indexes should be auto-named by the naming_convention."""
    Table(
        "t_meta_ix",
        conventions_metadata,
        Column("id", Integer, primary_key=True),
        Column("a", String, nullable=False),
        Column("b", Integer),
        Index(None, "a"),
        Index(None, "a", "b"),
    )
    conventions_metadata.create_all(sqlite_engine_memory)

    names = {ix["name"] for ix in inspect(sqlite_engine_memory).get_indexes("t_meta_ix")}
    assert "ix_t_meta_ix_t_meta_ix_a" in names
    assert "ix_t_meta_ix_t_meta_ix_a_t_meta_ix_b" in names


def test_unique_constraint_uses_convention_name_or_unique_index_name(
    sqlite_engine_memory: Engine, conventions_metadata: MetaData
):
    """Unique constraints should be named by convention.

    On SQLite, UNIQUE constraints reflect as unique indexes, so we accept
    either form.
    """
    Table(
        "t_meta_uq",
        conventions_metadata,
        Column("id", Integer, primary_key=True),
        Column("a", String, nullable=False),
        UniqueConstraint("a"),
    )
    conventions_metadata.create_all(sqlite_engine_memory)

    inspector = inspect(sqlite_engine_memory)
    idx = {ix["name"] for ix in inspector.get_indexes("t_meta_uq")}
    uq_names = {uc.get("name") for uc in inspector.get_unique_constraints("t_meta_uq")}
    assert "uq_t_meta_uq_a" in idx | uq_names


def test_check_constraint_uses_convention_with_explicit_name(
    sqlite_engine_memory: Engine, conventions_metadata: MetaData
):
    """Check constraints with explicit names should be prefixed by convention."""
    Table(
        "t_meta_ck",
        conventions_metadata,
        Column("id", Integer, primary_key=True),
        Column("a", Integer),
        CheckConstraint("a >= 0", name="nonneg"),
    )
    conventions_metadata.create_all(sqlite_engine_memory)

    checks = inspect(sqlite_engine_memory).get_check_constraints("t_meta_ck")
    assert "ck_t_meta_ck_nonneg" in {c.get("name") for c in checks}


def test_ledger_constraints_are_named(sqlite_engine_memory: Engine):
    """The ledger's own constraints follow the convention."""
    inspector = inspect(sqlite_engine_memory)
    checks = {c.get("name") for c in inspector.get_check_constraints("ledger_entries")}
    assert {
        "ck_ledger_entries_positive_amount",
        "ck_ledger_entries_direction_values",
        "ck_ledger_entries_payout_status_values",
    } <= checks
    uniques = {uc.get("name") for uc in inspector.get_unique_constraints("ledger_entries")}
    indexes = {ix["name"] for ix in inspector.get_indexes("ledger_entries")}
    assert "uq_ledger_entries_external_reference" in uniques | indexes
