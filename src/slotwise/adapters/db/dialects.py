"""Dialect-aware helpers.

SLOTWISE supports PostgreSQL and SQLite. This module keeps the few places
where they differ in one spot: dialect name normalization, the no-throw
"insert or ignore" statement used for lock rows, and recognizing lock-wait
timeouts in driver errors.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.exc import DBAPIError
    from sqlalchemy.sql.dml import Insert

# SQLSTATEs: lock_not_available, query_canceled (statement_timeout)
PG_TIMEOUT_CODES = frozenset({"55P03", "57014"})  # pragma: no mutate
SQLITE_BUSY_MESSAGES = ("database is locked", "database table is locked")  # pragma: no mutate


class UnsupportedDialect(Exception):
    """Raised when an unsupported database dialect is encountered."""


class DialectName(str, Enum):
    """Enumeration of supported SQLAlchemy dialect names.

    Attributes:
        POSTGRES: PostgreSQL dialect (``"postgresql"``).
        SQLITE:   SQLite dialect (``"sqlite"``).
    """

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str) -> DialectName:
        """Normalize a dialect or driver-qualified name (e.g. 'postgresql+psycopg').

        Raises:
            UnsupportedDialect: if the dialect is not recognized or supported.
        """
        base = (dialect_str or "").strip().lower().split("+", 1)[0]
        if base in {"postgres", "postgresql", "pg"}:
            return cls.POSTGRES
        if base == "sqlite":
            return cls.SQLITE
        raise UnsupportedDialect(f"Unsupported dialect: {dialect_str!r}")

    @classmethod
    def from_sqlalchemy(cls, obj: Engine | Connection) -> DialectName:
        """Extract the dialect from a SQLAlchemy Engine or Connection."""
        try:
            name = obj.dialect.name
        except AttributeError as e:
            raise UnsupportedDialect(
                f"Object {type(obj).__name__} does not expose .dialect.name"
            ) from e
        return cls.from_string(name)


def insert_ignoring_conflicts(
    dialect: DialectName, table: Table, values: dict[str, Any]
) -> Insert:
    """Build an INSERT that silently does nothing on any unique conflict."""
    if dialect is DialectName.POSTGRES:
        return pg_insert(table).values(**values).on_conflict_do_nothing()
    if dialect is DialectName.SQLITE:
        return sqlite_insert(table).values(**values).on_conflict_do_nothing()
    raise UnsupportedDialect(f"Unsupported dialect: {dialect!r}")  # pragma: no cover


def is_timeout(error: DBAPIError) -> bool:
    """True when a driver error means a lock wait or statement timed out."""
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in PG_TIMEOUT_CODES:
        return True
    message = str(orig if orig is not None else error).lower()
    return any(fragment in message for fragment in SQLITE_BUSY_MESSAGES)
