"""Unit of Work adapters for SLOTWISE.

`SqlAlchemyUnitOfWork` runs every repository over one SQLAlchemy Connection
and therefore one database transaction. `InMemoryUnitOfWork` gives the same
guarantees over `InMemoryData` for tests: transactions are serialized by a
lock shared through the data object and rolled back from a snapshot.
"""

from __future__ import annotations

import copy
import threading
import weakref
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from slotwise.adapters.db.dialects import DialectName, is_timeout
from slotwise.adapters.repositories.in_memory_adapters import (
    InMemoryBookingRepository,
    InMemoryData,
    InMemoryJobLockRepository,
    InMemoryLedgerRepository,
    InMemoryOwnerRepository,
    InMemoryPayoutRepository,
    InMemoryScheduleRepository,
)
from slotwise.adapters.repositories.sqlalchemy_adapters import (
    SqlAlchemyBookingRepository,
    SqlAlchemyJobLockRepository,
    SqlAlchemyLedgerRepository,
    SqlAlchemyOwnerRepository,
    SqlAlchemyPayoutRepository,
    SqlAlchemyScheduleRepository,
)
from slotwise.interfaces.errors import RequestTimeout, StoreUnavailableError
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


def _store_error(error: DBAPIError) -> Exception:
    if is_timeout(error):
        return RequestTimeout(f"lock wait timed out: {error.orig}")
    return StoreUnavailableError(str(error))


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy-backed Unit of Work."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.connection: Connection

    def __enter__(self):
        try:
            self.connection = self.engine.connect()
        except DBAPIError as e:
            raise _store_error(e) from e
        self.schedules = SqlAlchemyScheduleRepository(self.connection)
        self.bookings = SqlAlchemyBookingRepository(self.connection)
        self.ledger = SqlAlchemyLedgerRepository(self.connection)
        self.owners = SqlAlchemyOwnerRepository(self.connection)
        self.payouts = SqlAlchemyPayoutRepository(self.connection)
        self.job_locks = SqlAlchemyJobLockRepository(self.connection)
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            self.connection.close()

    def set_timeout(self, seconds: float | None) -> None:
        """Apply ``lock_timeout``/``statement_timeout`` to the open transaction.

        PostgreSQL only; SQLite waits at most the engine's busy timeout.
        """
        if seconds is None:
            return
        if DialectName.from_sqlalchemy(self.connection) is not DialectName.POSTGRES:
            return
        value = f"{max(1, int(seconds * 1000))}ms"
        try:
            for setting in ("lock_timeout", "statement_timeout"):
                self.connection.execute(
                    text("SELECT set_config(:name, :value, true)"),
                    {"name": setting, "value": value},
                )
        except DBAPIError as e:
            raise _store_error(e) from e

    def commit(self):
        try:
            self.connection.commit()
        except DBAPIError as e:
            raise _store_error(e) from e

    def rollback(self):
        self.connection.rollback()


_LOCKS: weakref.WeakKeyDictionary[InMemoryData, threading.RLock] = (
    weakref.WeakKeyDictionary()
)
_LOCKS_GUARD = threading.Lock()


def _lock_for(data: InMemoryData) -> threading.RLock:
    with _LOCKS_GUARD:
        if (lock := _LOCKS.get(data)) is None:
            lock = _LOCKS[data] = threading.RLock()
        return lock


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """In-memory Unit of Work with snapshot rollback.

    Units sharing one `InMemoryData` run one at a time, which gives the same
    allocation guarantees as the row locks of the SQL adapter.
    """

    def __init__(self, data: InMemoryData | None = None):
        self.data = data if data is not None else InMemoryData()
        self._lock = _lock_for(self.data)
        self._snapshot: InMemoryData | None = None
        self.committed = False
        self.schedules = InMemoryScheduleRepository(self.data)
        self.bookings = InMemoryBookingRepository(self.data)
        self.ledger = InMemoryLedgerRepository(self.data)
        self.owners = InMemoryOwnerRepository(self.data)
        self.payouts = InMemoryPayoutRepository(self.data)
        self.job_locks = InMemoryJobLockRepository(self.data)

    def __enter__(self):
        self._lock.acquire()  # pylint: disable=consider-using-with
        self._snapshot = copy.deepcopy(self.data)
        self.committed = False
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            self._snapshot = None
            self._lock.release()

    def commit(self):
        self._snapshot = copy.deepcopy(self.data)
        self.committed = True

    def rollback(self):
        if self._snapshot is None:
            return
        restored = copy.deepcopy(self._snapshot)
        for name in vars(restored):
            setattr(self.data, name, getattr(restored, name))
