"""Slot allocation and booking lifecycle handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from slotwise.config import Settings
from slotwise.domain import errors
from slotwise.domain.availability import find_containing, resolve_windows
from slotwise.domain.booking import Booking
from slotwise.domain.value_objects import BookingStatus, combine
from slotwise.interfaces.clock import Clock
from slotwise.interfaces.id_generator import IdGenerator
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork
from slotwise.service_layer import commands
from slotwise.service_layer.deadlines import Deadline

logger = logging.getLogger(__name__)


def book_slot(  # pylint: disable=too-many-locals
    cmd: commands.BookSlot,
    uow: AbstractUnitOfWork,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
) -> Booking:
    """Reserve a slot, failing rather than double-booking.

    The conflict check and the insert run in one transaction that holds the
    (store, date) allocation lock, so of several concurrent requests for
    overlapping slots exactly one commits; the rest raise SlotUnavailable.

    Raises:
        StoreServiceNotFound: Unknown service, or one of another store.
        ServiceInactive: The service is switched off.
        BookingInPast: The slot starts before now.
        OutsideHours: The slot does not fit inside one open window.
        SlotUnavailable: The slot overlaps a non-cancelled booking.
        RequestTimeout: The deadline passed or a lock wait timed out.
    """
    deadline = Deadline.after(clock, cmd.timeout_s, settings.request_timeout_s)

    with uow:
        uow.set_timeout(deadline.remaining())

        service = uow.schedules.get_store_service(cmd.store_service_id)
        if service is None or service.store_id != cmd.store_id:
            raise errors.StoreServiceNotFound(cmd.store_service_id, cmd.store_id)

        now = clock.now()
        booking = Booking.create(
            booking_id=id_generator.new_id(),
            customer_id=cmd.customer_id,
            service=service,
            employee_id=cmd.employee_id,
            booking_date=cmd.booking_date,
            start_time=cmd.start_time,
            notes=cmd.notes,
            now=now,
        )
        if combine(cmd.booking_date, cmd.start_time, settings.tzinfo) <= now:
            raise errors.BookingInPast(cmd.booking_date, cmd.start_time)

        employee_rows = (
            uow.schedules.employee_schedule(cmd.store_id, cmd.employee_id)
            if cmd.employee_id is not None
            else None
        )
        windows = resolve_windows(
            uow.schedules.store_schedule(cmd.store_id), cmd.booking_date, employee_rows
        )
        if find_containing(windows, booking.window) is None:
            raise errors.OutsideHours(cmd.booking_date, booking.start_time, booking.end_time)

        deadline.check("slot allocation")
        uow.bookings.lock_slot(cmd.store_id, cmd.booking_date)
        deadline.check("slot allocation")

        taken = uow.bookings.active_on(cmd.store_id, cmd.booking_date, cmd.employee_id)
        if any(other.window.overlaps(booking.window) for other in taken):
            raise errors.SlotUnavailable(
                cmd.booking_date, booking.start_time, booking.end_time
            )

        uow.bookings.add(booking)
        uow.commit()

    logger.info(
        "Booked %s at store %s on %s %s (%s)",
        booking.id,
        booking.store_id,
        booking.booking_date.isoformat(),
        booking.window,
        cmd.employee_id or "any employee",
    )
    return booking


def _transition(
    booking_id: str,
    status: BookingStatus,
    uow: AbstractUnitOfWork,
    clock: Clock,
) -> Booking:
    with uow:
        booking = uow.bookings.get(booking_id, for_update=True)
        if booking is None:
            raise errors.BookingNotFound(booking_id)
        previous = booking.status
        booking.transition_to(status, clock.now())
        uow.bookings.update(booking)
        uow.commit()
    logger.info("Booking %s: %s -> %s", booking_id, previous.value, status.value)
    return booking


def confirm_booking(
    cmd: commands.ConfirmBooking, uow: AbstractUnitOfWork, clock: Clock
) -> Booking:
    """PENDING -> CONFIRMED."""
    return _transition(cmd.booking_id, BookingStatus.CONFIRMED, uow, clock)


def complete_booking(
    cmd: commands.CompleteBooking, uow: AbstractUnitOfWork, clock: Clock
) -> Booking:
    """CONFIRMED -> COMPLETED."""
    return _transition(cmd.booking_id, BookingStatus.COMPLETED, uow, clock)


def cancel_booking(
    cmd: commands.CancelBooking, uow: AbstractUnitOfWork, clock: Clock
) -> Booking:
    """PENDING or CONFIRMED -> CANCELLED; the slot becomes bookable again.

    Money already captured stays in the ledger; refunds are separate commands.
    """
    return _transition(cmd.booking_id, BookingStatus.CANCELLED, uow, clock)


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.BookSlot: book_slot,
    commands.ConfirmBooking: confirm_booking,
    commands.CompleteBooking: complete_booking,
    commands.CancelBooking: cancel_booking,
}
