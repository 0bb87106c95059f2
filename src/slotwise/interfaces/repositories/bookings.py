"""Booking persistence port."""

from __future__ import annotations

import abc
from datetime import date

from slotwise.domain.booking import Booking


class BookingRepository(abc.ABC):
    """Contract for storing bookings and serializing slot allocation."""

    @abc.abstractmethod
    def add(self, booking: Booking) -> None:
        """Insert a new booking."""

    @abc.abstractmethod
    def get(self, booking_id: str, *, for_update: bool = False) -> Booking | None:
        """Load a booking, optionally locking its row until the transaction ends."""

    @abc.abstractmethod
    def update(self, booking: Booking) -> None:
        """Persist status and payment fields of an existing booking."""

    @abc.abstractmethod
    def lock_slot(self, store_id: str, booking_date: date) -> None:
        """Serialize allocation for one store and day.

        Blocks until no other open transaction holds the same (store, date)
        lock; the lock is held until commit or rollback.
        """

    @abc.abstractmethod
    def active_on(
        self, store_id: str, booking_date: date, employee_id: str | None = None
    ) -> list[Booking]:
        """Non-cancelled bookings of the store on the date, ordered by start time.

        With ``employee_id``, that employee's bookings plus the ones not
        assigned to any employee, since those can be served by anyone.
        """
