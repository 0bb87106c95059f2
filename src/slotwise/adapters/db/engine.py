"""Database engine factory and helpers.

This module centralizes creation of SQLAlchemy Engines and applies
backend-specific tuning:

- **SQLite**: adds connection PRAGMAs to enforce foreign keys, enable WAL,
  and tune durability/temporary storage. Transactions are opened with
  ``BEGIN IMMEDIATE`` so that writers serialize at BEGIN instead of failing
  on a read-to-write lock upgrade; this is what makes the booking conflict
  check and insert atomic on SQLite.
- **PostgreSQL**: no tuning here; row locks and per-transaction timeouts are
  applied by the unit of work and repositories.

Use this module whenever you need an Engine so that all connections are
consistently configured.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Connection, Engine

SQLITE_NAMES = {"sqlite", "sqlite+pysqlite"}
DEFAULT_LOCK_TIMEOUT_S = 5.0  # pragma: no mutate


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string corresponds to SQLite.

    Args:
        url: A database URL string or SQLAlchemy :class:`URL`.

    Returns:
        bool: True if the backend is SQLite, otherwise False.
    """
    u = make_url(str(url))
    return u.get_backend_name() in SQLITE_NAMES


def make_engine(
    url: str | URL, *, echo: bool = False, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S
) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    If the backend is SQLite, applies a set of PRAGMAs to improve safety and
    concurrency for development/test usage:
        - ``foreign_keys=ON`` (enforce referential integrity)
        - ``journal_mode=WAL`` (write-ahead logging for concurrency)
        - ``synchronous=NORMAL`` (balanced durability)
        - ``temp_store=MEMORY`` (reduce temp file I/O)

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.
        lock_timeout_s: SQLite busy timeout; how long a transaction waits for
            another writer before failing with "database is locked".

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    if not is_sqlite(url):
        return create_engine(url, echo=echo)

    engine = create_engine(url, echo=echo, connect_args={"timeout": lock_timeout_s})

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
        # take over transaction control from pysqlite so "begin" below is used
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.execute("PRAGMA temp_store=MEMORY;")
        cur.close()

    @event.listens_for(engine, "begin")
    def _sqlite_begin_immediate(conn: Connection):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine
