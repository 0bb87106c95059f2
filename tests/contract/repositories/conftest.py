"""Fixtures for repository and unit of work contract tests.

Every test runs against each backend: the in-memory store, SQLite (in-memory
and file-backed) and PostgreSQL. All backends are seeded with the salon world
from `tests.fixtures.datagen`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timedelta

import pytest

from slotwise.adapters.repositories.in_memory_adapters import InMemoryData
from slotwise.adapters.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from slotwise.domain.booking import Booking
from slotwise.domain.ledger import LedgerEntry
from slotwise.domain.value_objects import LedgerDirection
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork
from tests.fixtures.datagen import CUT, MONDAY, NOW, OWNER, seed_memory

# pylint: disable=redefined-outer-name

ALL_BACKENDS = ["memory", "sqlite_engine_memory", "sqlite_engine_file", "postgres_engine"]
CONCURRENT_BACKENDS = ["memory", "sqlite_engine_file", "postgres_engine"]


def _uow_factory(request: pytest.FixtureRequest) -> Callable[[], AbstractUnitOfWork]:
    if request.param == "memory":
        data = seed_memory(InMemoryData())
        return lambda: InMemoryUnitOfWork(data)
    engine = request.getfixturevalue("seed_salon")(request.getfixturevalue(request.param))
    return lambda: SqlAlchemyUnitOfWork(engine)


@pytest.fixture(params=ALL_BACKENDS)
def make_uow(request: pytest.FixtureRequest) -> Callable[[], AbstractUnitOfWork]:
    """Factory for fresh units of work over one seeded backend."""
    return _uow_factory(request)


@pytest.fixture(params=CONCURRENT_BACKENDS)
def make_concurrent_uow(request: pytest.FixtureRequest) -> Callable[[], AbstractUnitOfWork]:
    """Like `make_uow`, limited to backends that accept many threads."""
    return _uow_factory(request)


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    """Factory for Monday haircut bookings at ``start``."""

    def _make(
        booking_id: str,
        start: time = time(9, 0),
        *,
        employee_id: str | None = None,
        booking_date: date = MONDAY,
    ) -> Booking:
        return Booking.create(
            booking_id=booking_id,
            customer_id="cus_1",
            service=CUT,
            employee_id=employee_id,
            booking_date=booking_date,
            start_time=start,
            now=NOW,
        )

    return _make


@pytest.fixture
def make_entry() -> Callable[..., LedgerEntry]:
    """Factory for ledger entries of ``own_1`` with increasing timestamps."""
    counter = iter(range(1, 10_000))

    def _make(
        entry_id: str,
        amount: int,
        *,
        booking_id: str | None = "bk_1",
        direction: LedgerDirection = LedgerDirection.CAPTURE,
        external_reference: str | None = None,
        created_at: datetime | None = None,
    ) -> LedgerEntry:
        return LedgerEntry(
            id=entry_id,
            owner_id=OWNER,
            direction=direction,
            amount_minor=amount,
            booking_id=booking_id,
            external_reference=external_reference,
            created_at=created_at or NOW + timedelta(seconds=next(counter)),
        )

    return _make
