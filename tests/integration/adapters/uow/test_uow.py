"""Integration tests for the SQLAlchemy-backed Unit of Work adapter.

Verifies commit and rollback behavior of SqlAlchemyUnitOfWork and how it
reports store failures.
"""

import threading
from datetime import time

import pytest
from sqlalchemy import text

from slotwise.adapters.db.engine import make_engine
from slotwise.adapters.unit_of_work import SqlAlchemyUnitOfWork
from slotwise.domain.booking import Booking
from slotwise.interfaces.errors import RequestTimeout, StoreUnavailableError
from tests.fixtures.datagen import CUT, MONDAY, NOW, OTHER_OWNER, OWNER, STORE

# pylint: disable=redefined-outer-name


@pytest.fixture
def seeded_memory(sqlite_engine_memory, seed_salon):
    """In-memory SQLite engine holding the salon world."""
    return seed_salon(sqlite_engine_memory)


def a_booking(booking_id="bk_1"):
    return Booking.create(
        booking_id=booking_id,
        customer_id="cus_1",
        service=CUT,
        employee_id=None,
        booking_date=MONDAY,
        start_time=time(9, 0),
        now=NOW,
    )


def test_uow_commit_persists(seeded_memory):
    """Unit of Work persists committed bookings."""
    uow = SqlAlchemyUnitOfWork(seeded_memory)
    with uow:
        uow.bookings.add(a_booking())
        uow.commit()

    with uow:
        assert uow.bookings.get("bk_1") == a_booking()


def test_uow_rollback_discards_booking(seeded_memory):
    """Unit of Work discards uncommitted bookings."""
    uow = SqlAlchemyUnitOfWork(seeded_memory)
    with uow:
        uow.bookings.add(a_booking())
        # Intentionally not calling commit()

    with uow:
        assert uow.bookings.get("bk_1") is None


def test_rolls_back_on_error(seeded_memory):
    """Ensure an exception inside the UnitOfWork context triggers a rollback."""

    class MyException(Exception):
        """Custom exception for testing."""

    uow = SqlAlchemyUnitOfWork(seeded_memory)
    with pytest.raises(MyException):
        with uow:
            uow.owners.record_payout_failure(OWNER)
            raise MyException()

    with uow:
        assert uow.owners.get(OWNER).consecutive_payout_failures == 0


def test_set_timeout_is_ignored_by_sqlite(seeded_memory):
    """SQLite has no per-transaction lock timeout; the call is a no-op."""
    uow = SqlAlchemyUnitOfWork(seeded_memory)
    with uow:
        uow.set_timeout(0.5)
        uow.set_timeout(None)
        assert uow.owners.get(OWNER) is not None


def test_unreachable_database_is_a_store_error(tmp_path):
    """A database that cannot be opened surfaces as StoreUnavailableError."""
    engine = make_engine(f"sqlite+pysqlite:///{tmp_path / 'missing' / 'salon.db'}")
    with pytest.raises(StoreUnavailableError):
        with SqlAlchemyUnitOfWork(engine):
            pass


def test_postgres_set_timeout_applies_to_transaction(postgres_engine, seed_salon):
    """lock_timeout and statement_timeout are scoped to the open transaction."""
    uow = SqlAlchemyUnitOfWork(seed_salon(postgres_engine))
    with uow:
        uow.set_timeout(1.5)
        assert uow.connection.execute(text("SHOW lock_timeout")).scalar() == "1500ms"
    with uow:
        assert uow.connection.execute(text("SHOW lock_timeout")).scalar() == "0"


def test_postgres_lock_wait_becomes_request_timeout(postgres_engine, seed_salon):
    """A writer blocked past its lock timeout gets RequestTimeout."""
    engine = seed_salon(postgres_engine)
    holding = threading.Event()
    done = threading.Event()

    def hold_slot_lock():
        with SqlAlchemyUnitOfWork(engine) as uow:
            uow.bookings.lock_slot(STORE, MONDAY)
            holding.set()
            done.wait(10)

    holder = threading.Thread(target=hold_slot_lock)
    holder.start()
    try:
        assert holding.wait(10)
        with pytest.raises(RequestTimeout):
            with SqlAlchemyUnitOfWork(engine) as uow:
                uow.set_timeout(0.2)
                uow.bookings.lock_slot(STORE, MONDAY)
    finally:
        done.set()
        holder.join(timeout=10)


def test_postgres_owner_lock_blocks_a_second_transaction(postgres_engine, seed_salon):
    """A refund and a payout batch for one owner cannot read pending money side by side."""
    engine = seed_salon(postgres_engine)
    holding = threading.Event()
    done = threading.Event()

    def hold_owner_lock():
        with SqlAlchemyUnitOfWork(engine) as uow:
            uow.owners.lock(OWNER)
            holding.set()
            done.wait(10)

    holder = threading.Thread(target=hold_owner_lock)
    holder.start()
    try:
        assert holding.wait(10)
        with pytest.raises(RequestTimeout):
            with SqlAlchemyUnitOfWork(engine) as uow:
                uow.set_timeout(0.2)
                uow.owners.lock(OWNER)
        with SqlAlchemyUnitOfWork(engine) as uow:
            uow.set_timeout(0.2)
            uow.owners.lock(OTHER_OWNER)
    finally:
        done.set()
        holder.join(timeout=10)
