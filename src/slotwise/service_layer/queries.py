"""Read-side queries.

Queries open their own transaction on the unit of work, read, and roll back.
They never change state, so callers may use them from any entrypoint without
going through the message bus.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from slotwise.domain import errors
from slotwise.domain.availability import candidate_slots
from slotwise.domain.availability import resolve_windows as _resolve
from slotwise.domain.value_objects import (
    BookingStatus,
    PaymentStatus,
    TimeWindow,
    combine,
)
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork

DEFAULT_STEP_MINUTES = 30  # pragma: no mutate


@dataclass(frozen=True)
class PaymentSummary:
    """Money view of one booking."""

    booking_id: str
    total_minor: int
    paid_minor: int
    payment_status: PaymentStatus
    status: BookingStatus

    @property
    def remaining_minor(self) -> int:
        return self.total_minor - self.paid_minor

    @property
    def is_fully_paid(self) -> bool:
        return self.payment_status is PaymentStatus.FULL


def resolve_windows(
    uow: AbstractUnitOfWork,
    store_id: str,
    day: date,
    employee_id: str | None = None,
) -> tuple[TimeWindow, ...]:
    """Open windows of a store (optionally narrowed to one employee) on ``day``."""
    with uow:
        store_rows = uow.schedules.store_schedule(store_id)
        employee_rows = (
            uow.schedules.employee_schedule(store_id, employee_id)
            if employee_id is not None
            else None
        )
    return _resolve(store_rows, day, employee_rows)


def list_open_slots(  # pylint: disable=too-many-arguments
    uow: AbstractUnitOfWork,
    store_id: str,
    store_service_id: str,
    day: date,
    employee_id: str | None = None,
    *,
    step_minutes: int = DEFAULT_STEP_MINUTES,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[TimeWindow]:
    """Slots a `BookSlot` for the service would currently accept.

    Candidates are stepped through each open window and dropped when they
    overlap a non-cancelled booking or, given ``now``, start before it.
    The answer is advisory: a concurrent booking can still take a slot.

    Raises:
        StoreServiceNotFound: Unknown service, or one of another store.
    """
    with uow:
        service = uow.schedules.get_store_service(store_service_id)
        if service is None or service.store_id != store_id:
            raise errors.StoreServiceNotFound(store_service_id, store_id)
        store_rows = uow.schedules.store_schedule(store_id)
        employee_rows = (
            uow.schedules.employee_schedule(store_id, employee_id)
            if employee_id is not None
            else None
        )
        taken = [b.window for b in uow.bookings.active_on(store_id, day, employee_id)]

    if not service.is_active:
        return []
    windows = _resolve(store_rows, day, employee_rows)
    slots = candidate_slots(windows, service.duration_minutes, step_minutes)
    return [
        slot
        for slot in slots
        if not any(slot.overlaps(other) for other in taken)
        and (now is None or combine(day, slot.start_time, tz) > now)
    ]


def payment_summary(uow: AbstractUnitOfWork, booking_id: str) -> PaymentSummary:
    """Total, paid and remaining amounts of a booking.

    Raises:
        BookingNotFound: Unknown booking.
    """
    with uow:
        booking = uow.bookings.get(booking_id)
    if booking is None:
        raise errors.BookingNotFound(booking_id)
    return PaymentSummary(
        booking_id=booking.id,
        total_minor=booking.total_price_minor,
        paid_minor=booking.paid_amount_minor,
        payment_status=booking.payment_status,
        status=booking.status,
    )
