"""Unit tests for slot allocation and booking lifecycle handlers."""

import dataclasses
from datetime import date, time

import pytest

from slotwise.domain import errors
from slotwise.domain.value_objects import BookingStatus
from slotwise.service_layer import commands, queries
from tests.fixtures.datagen import (
    CUT,
    EMPLOYEE,
    FORMER_EMPLOYEE,
    MONDAY,
    OLD,
    STORE,
    TRIM,
    TUESDAY,
)

# pylint: disable=magic-value-comparison
# pylint: disable=too-few-public-methods


class TestBookSlot:
    """Tests for the book_slot handler via the message bus."""

    @staticmethod
    def test_books_pending_slot(bus, make_book_slot):
        """A free slot inside opening hours becomes a PENDING booking."""
        booking = bus.handle(make_book_slot(time(9, 0)))
        assert booking.id == "id_000001"
        assert booking.status is BookingStatus.PENDING
        assert booking.end_time == time(10, 0)
        assert booking.total_price_minor == CUT.price_minor
        assert bus.uow.committed is True
        assert bus.uow.data.bookings[booking.id].store_id == STORE

    @staticmethod
    def test_overlapping_slot_is_rejected(bus, make_book_slot):
        """09:00-10:00 is taken, so 09:30 fails and 10:00 succeeds."""
        bus.handle(make_book_slot(time(9, 0)))
        with pytest.raises(errors.SlotUnavailable):
            bus.handle(make_book_slot(time(9, 30), customer_id="cus_2"))
        second = bus.handle(make_book_slot(time(10, 0), customer_id="cus_2"))
        assert second.start_time == time(10, 0)
        assert len(bus.uow.data.bookings) == 2

    @staticmethod
    def test_rejected_booking_leaves_no_trace(bus, make_book_slot):
        """A failed allocation rolls back completely."""
        bus.handle(make_book_slot(time(9, 0)))
        with pytest.raises(errors.SlotUnavailable):
            bus.handle(make_book_slot(time(9, 0)))
        assert len(bus.uow.data.bookings) == 1

    @staticmethod
    def test_booking_in_past(bus, make_book_slot):
        """Slots before now are refused even when the store is open."""
        with pytest.raises(errors.BookingInPast):
            bus.handle(make_book_slot(time(9, 0), booking_date=date(2029, 12, 31)))

    @staticmethod
    @pytest.mark.parametrize(
        "start, day",
        [(time(16, 30), MONDAY), (time(8, 30), MONDAY), (time(9, 0), TUESDAY)],
    )
    def test_outside_hours(bus, make_book_slot, start, day):
        """Slots must fit inside one open window of the day."""
        with pytest.raises(errors.OutsideHours):
            bus.handle(make_book_slot(start, booking_date=day))

    @staticmethod
    def test_last_slot_of_the_day(bus, make_book_slot):
        """A slot ending exactly at closing time fits."""
        assert bus.handle(make_book_slot(time(16, 0))).end_time == time(17, 0)

    @staticmethod
    def test_inactive_service(bus, make_book_slot):
        """Switched-off services cannot be booked."""
        with pytest.raises(errors.ServiceInactive):
            bus.handle(make_book_slot(store_service_id=OLD.id))

    @staticmethod
    @pytest.mark.parametrize("service_id", ["svc_missing", TRIM.id])
    def test_unknown_or_foreign_service(bus, make_book_slot, service_id):
        """The service must exist and belong to the store."""
        with pytest.raises(errors.StoreServiceNotFound):
            bus.handle(make_book_slot(store_service_id=service_id))


class TestEmployeeScoping:
    """Bookings naming an employee."""

    @staticmethod
    def test_employee_hours_narrow_the_store(bus, make_book_slot):
        """emp_a works 09:00-13:00, so 13:00 is outside their hours."""
        bus.handle(make_book_slot(time(12, 0), employee_id=EMPLOYEE))
        with pytest.raises(errors.OutsideHours):
            bus.handle(make_book_slot(time(13, 0), employee_id=EMPLOYEE))

    @staticmethod
    def test_inactive_assignment_has_no_hours(bus, make_book_slot):
        """An employee who left the store cannot be booked there."""
        with pytest.raises(errors.OutsideHours):
            bus.handle(make_book_slot(time(9, 0), employee_id=FORMER_EMPLOYEE))

    @staticmethod
    def test_employee_booking_conflicts_with_unassigned_bookings(bus, make_book_slot):
        """A booking without employee blocks every employee, in either order."""
        bus.handle(make_book_slot(time(9, 0)))
        with pytest.raises(errors.SlotUnavailable):
            bus.handle(make_book_slot(time(9, 0), employee_id=EMPLOYEE))

    @staticmethod
    def test_employee_booking_ignores_other_employees(bus, make_book_slot):
        """Bookings held by another employee do not block this one."""
        first = bus.handle(make_book_slot(time(10, 0), employee_id=EMPLOYEE))
        with bus.uow as uow:
            uow.bookings.add(
                dataclasses.replace(
                    first,
                    id="bk_other",
                    employee_id="emp_other",
                    start_time=time(11, 0),
                    end_time=time(12, 0),
                )
            )
            uow.commit()
        booking = bus.handle(make_book_slot(time(11, 0), employee_id=EMPLOYEE))
        assert booking.employee_id == EMPLOYEE

    @staticmethod
    def test_store_booking_conflicts_with_any_employee(bus, make_book_slot):
        """A booking without employee conflicts with every booking of the store."""
        bus.handle(make_book_slot(time(9, 0), employee_id=EMPLOYEE))
        with pytest.raises(errors.SlotUnavailable):
            bus.handle(make_book_slot(time(9, 30)))


class TestLifecycle:
    """Tests for confirm, complete and cancel."""

    @staticmethod
    def test_confirm_then_complete(bus, make_book_slot):
        """PENDING -> CONFIRMED -> COMPLETED."""
        booking = bus.handle(make_book_slot())
        bus.handle(commands.ConfirmBooking(booking.id))
        done = bus.handle(commands.CompleteBooking(booking.id))
        assert done.status is BookingStatus.COMPLETED
        assert bus.uow.data.bookings[booking.id].status is BookingStatus.COMPLETED

    @staticmethod
    def test_complete_requires_confirmation(bus, make_book_slot):
        """PENDING cannot jump to COMPLETED."""
        booking = bus.handle(make_book_slot())
        with pytest.raises(errors.InvalidTransitionError):
            bus.handle(commands.CompleteBooking(booking.id))

    @staticmethod
    def test_cancel_frees_the_slot(bus, make_book_slot):
        """A cancelled slot can be booked again."""
        booking = bus.handle(make_book_slot(time(9, 0)))
        bus.handle(commands.CancelBooking(booking.id))
        again = bus.handle(make_book_slot(time(9, 30), customer_id="cus_2"))
        assert again.status is BookingStatus.PENDING
        open_starts = [
            s.start_time for s in queries.list_open_slots(bus.uow, STORE, CUT.id, MONDAY)
        ]
        assert time(9, 0) not in open_starts
        assert time(10, 30) in open_starts

    @staticmethod
    def test_cancelled_is_terminal(bus, make_book_slot):
        """Nothing follows CANCELLED."""
        booking = bus.handle(make_book_slot())
        bus.handle(commands.CancelBooking(booking.id))
        with pytest.raises(errors.InvalidTransitionError):
            bus.handle(commands.ConfirmBooking(booking.id))

    @staticmethod
    def test_unknown_booking(bus):
        """Transitions on a missing booking raise BookingNotFound."""
        with pytest.raises(errors.BookingNotFound):
            bus.handle(commands.CancelBooking("bk_missing"))
