"""BookingRepository backed by SQLAlchemy Core.

Allocation for a (store, date) is serialized through a row in
``slot_locks``: the row is created on first use with a no-throw insert and
then bumped with an UPDATE, which takes its row lock on PostgreSQL. On SQLite
the whole transaction already holds the database write lock from
``BEGIN IMMEDIATE`` (see `slotwise.adapters.db.engine`), so the same
statements are harmless there.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from sqlalchemy import insert, or_, select, update

from slotwise.adapters.db.dialects import insert_ignoring_conflicts
from slotwise.adapters.db.schema import bookings, slot_locks
from slotwise.domain.booking import Booking
from slotwise.domain.value_objects import BookingStatus, PaymentStatus
from slotwise.interfaces.repositories import BookingRepository

from .base import SqlAlchemyRepository


def _to_booking(row: Mapping[str, Any]) -> Booking:
    return Booking(
        id=row["id"],
        customer_id=row["customer_id"],
        store_id=row["store_id"],
        store_service_id=row["store_service_id"],
        employee_id=row["employee_id"],
        booking_date=row["booking_date"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        total_price_minor=int(row["total_price_minor"]),
        paid_amount_minor=int(row["paid_amount_minor"]),
        payment_status=PaymentStatus(row["payment_status"]),
        status=BookingStatus(row["status"]),
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlAlchemyBookingRepository(SqlAlchemyRepository, BookingRepository):
    """Bookings table access plus the per-day allocation lock."""

    def add(self, booking: Booking) -> None:
        self._execute(
            insert(bookings).values(
                id=booking.id,
                customer_id=booking.customer_id,
                store_id=booking.store_id,
                store_service_id=booking.store_service_id,
                employee_id=booking.employee_id,
                booking_date=booking.booking_date,
                start_time=booking.start_time,
                end_time=booking.end_time,
                total_price_minor=booking.total_price_minor,
                paid_amount_minor=booking.paid_amount_minor,
                payment_status=booking.payment_status.value,
                status=booking.status.value,
                notes=booking.notes,
                created_at=booking.created_at,
                updated_at=booking.updated_at or booking.created_at,
            )
        )

    def get(self, booking_id: str, *, for_update: bool = False) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update()  # ignored by SQLite
        if not (row := self._execute(stmt).mappings().fetchone()):
            return None
        return _to_booking(row)

    def update(self, booking: Booking) -> None:
        self._execute(
            update(bookings)
            .where(bookings.c.id == booking.id)
            .values(
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                paid_amount_minor=booking.paid_amount_minor,
                updated_at=booking.updated_at,
            )
        )

    def lock_slot(self, store_id: str, booking_date: date) -> None:
        self._execute(
            insert_ignoring_conflicts(
                self.dialect,
                slot_locks,
                {"store_id": store_id, "booking_date": booking_date, "version": 0},
            )
        )
        self._execute(
            update(slot_locks)
            .where(
                slot_locks.c.store_id == store_id,
                slot_locks.c.booking_date == booking_date,
            )
            .values(version=slot_locks.c.version + 1)
        )

    def active_on(
        self, store_id: str, booking_date: date, employee_id: str | None = None
    ) -> list[Booking]:
        stmt = (
            select(bookings)
            .where(
                bookings.c.store_id == store_id,
                bookings.c.booking_date == booking_date,
                bookings.c.status != BookingStatus.CANCELLED.value,
            )
            .order_by(bookings.c.start_time, bookings.c.id)
        )
        if employee_id is not None:
            stmt = stmt.where(
                or_(bookings.c.employee_id == employee_id, bookings.c.employee_id.is_(None))
            )
        return [_to_booking(row) for row in self._execute(stmt).mappings()]
