"""Unit tests for database dialect handling."""

import pytest
from sqlalchemy import Column, Integer, MetaData, Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError

from slotwise.adapters.db.dialects import (
    DialectName,
    UnsupportedDialect,
    insert_ignoring_conflicts,
    is_timeout,
)

# pylint: disable=too-few-public-methods


@pytest.mark.parametrize(
    "input_str,expected",
    [
        ("postgresql", DialectName.POSTGRES),
        ("postgres", DialectName.POSTGRES),
        ("pg", DialectName.POSTGRES),
        ("postgresql+psycopg", DialectName.POSTGRES),
        ("sqlite", DialectName.SQLITE),
        ("sqlite+pysqlite", DialectName.SQLITE),
    ],
)
def test_from_string_aliases(input_str, expected):
    """Test that various dialect string aliases map correctly to DialectName."""
    assert DialectName.from_string(input_str) is expected


@pytest.mark.parametrize("bad", [None, "", "  ", "mysql", "duckdb"])
def test_from_string_rejects_unsupported(bad):
    """Test that unsupported or invalid dialect strings raise UnsupportedDialect."""
    with pytest.raises(UnsupportedDialect):
        DialectName.from_string(bad)


def test_from_sqlalchemy_accepts_engine_like_objects():
    """Test that from_sqlalchemy accepts objects with .dialect.name attribute."""

    class FakeDialect:  # minimal stub; no SQLAlchemy import needed
        """A fake dialect with a name attribute."""

        name = "postgresql+psycopg"

    class FakeEngine:
        """A fake engine exposing a dialect attribute."""

        dialect = FakeDialect()

    assert DialectName.from_sqlalchemy(FakeEngine()) is DialectName.POSTGRES  # type: ignore[arg-type]


def test_from_sqlalchemy_raises_when_missing_attribute():
    """Test that from_sqlalchemy raises UnsupportedDialect when .dialect.name is missing."""

    class NotAnEngine:  # no .dialect.name
        """A class that does not have a dialect attribute."""

    with pytest.raises(UnsupportedDialect):
        DialectName.from_sqlalchemy(NotAnEngine())  # type: ignore[arg-type]


class _Orig(Exception):
    """Driver exception carrying an optional SQLSTATE."""

    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    "orig, expected",
    [
        (_Orig("canceling statement due to lock timeout", "55P03"), True),
        (_Orig("canceling statement due to statement timeout", "57014"), True),
        (_Orig("database is locked"), True),
        (_Orig("duplicate key value violates unique constraint", "23505"), False),
    ],
)
def test_is_timeout(orig, expected):
    """Lock-wait and statement timeouts are recognized on both backends."""
    error = DBAPIError("SELECT 1", {}, orig)
    assert is_timeout(error) is expected


@pytest.mark.parametrize("dialect", [DialectName.POSTGRES, DialectName.SQLITE])
def test_insert_ignoring_conflicts(dialect):
    """The statement renders ON CONFLICT DO NOTHING for the dialect."""
    table = Table("t_ignore", MetaData(), Column("id", Integer, primary_key=True))
    stmt = insert_ignoring_conflicts(dialect, table, {"id": 1})
    engine_dialect = (
        postgresql.dialect() if dialect is DialectName.POSTGRES else sqlite.dialect()
    )
    assert "ON CONFLICT DO NOTHING" in str(stmt.compile(dialect=engine_dialect))
