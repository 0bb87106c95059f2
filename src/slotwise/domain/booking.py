"""Booking aggregate"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import ClassVar

from . import errors
from .ledger import PaymentState
from .value_objects import (
    MINUTES_PER_DAY,
    BookingStatus,
    PaymentStatus,
    StoreService,
    TimeWindow,
    to_minutes,
)

# pylint: disable=too-many-instance-attributes


@dataclass
class Booking:
    """Aggregate root representing one reserved slot and its payment state.

    ``paid_amount_minor`` and ``payment_status`` are a materialized view of
    the ledger; only `apply_payment_state` writes them.
    """

    TRANSITIONS: ClassVar[dict[BookingStatus, frozenset[BookingStatus]]] = {
        BookingStatus.PENDING: frozenset(
            {BookingStatus.CONFIRMED, BookingStatus.CANCELLED}
        ),
        BookingStatus.CONFIRMED: frozenset(
            {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
        ),
        BookingStatus.COMPLETED: frozenset(),
        BookingStatus.CANCELLED: frozenset(),
    }

    id: str
    customer_id: str
    store_id: str
    store_service_id: str
    employee_id: str | None
    booking_date: date
    start_time: time
    end_time: time
    total_price_minor: int
    paid_amount_minor: int = 0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: BookingStatus = BookingStatus.PENDING
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        booking_id: str,
        customer_id: str,
        service: StoreService,
        employee_id: str | None,
        booking_date: date,
        start_time: time,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """Create a PENDING booking for ``service`` starting at ``start_time``.

        The end time is derived from the service duration and the total price
        is snapshotted from the service price.

        Raises:
            ServiceInactive: If the service is switched off.
            OutsideHours: If the slot would run past midnight.
        """
        if not service.is_active:
            raise errors.ServiceInactive(service.id)
        window = slot_window(start_time, service.duration_minutes)
        if window is None:
            raise errors.OutsideHours(booking_date, start_time, None)
        return cls(
            id=booking_id,
            customer_id=customer_id,
            store_id=service.store_id,
            store_service_id=service.id,
            employee_id=employee_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=window.end_time,
            total_price_minor=service.price_minor,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    # --- Queries ---

    @property
    def window(self) -> TimeWindow:
        """The booked interval ``[start_time, end_time)``."""
        return TimeWindow.from_times(self.start_time, self.end_time)

    @property
    def occupies_slot(self) -> bool:
        """Cancelled bookings free their slot; every other state holds it."""
        return self.status is not BookingStatus.CANCELLED

    # --- Commands ---

    def transition_to(self, new_status: BookingStatus, now: datetime | None = None) -> None:
        """Move to ``new_status`` if the lifecycle allows it.

        Raises:
            InvalidTransitionError: For any move not in `TRANSITIONS`.
        """
        if new_status not in self.TRANSITIONS[self.status]:
            raise errors.InvalidTransitionError(
                self.id, self.status.value, new_status.value
            )
        self.status = new_status
        self.updated_at = now

    def ensure_payable(self) -> None:
        """Raise BookingNotPayable unless the booking can take a capture."""
        if self.status is BookingStatus.CANCELLED:
            raise errors.BookingNotPayable(self.id, self.status.value)

    def apply_payment_state(
        self,
        state: PaymentState,
        *,
        confirm_on_partial: bool = False,
        now: datetime | None = None,
    ) -> None:
        """Overwrite the materialized payment fields with a ledger-derived state.

        A PENDING booking becomes CONFIRMED once payment is FULL, or already at
        PARTIAL when ``confirm_on_partial`` is set.
        """
        if not 0 <= state.paid_minor <= self.total_price_minor:
            raise ValueError(
                f"derived paid amount {state.paid_minor} outside [0, {self.total_price_minor}]"
            )
        self.paid_amount_minor = state.paid_minor
        self.payment_status = state.status
        self.updated_at = now

        confirming = state.status is PaymentStatus.FULL or (
            confirm_on_partial and state.status is PaymentStatus.PARTIAL
        )
        if self.status is BookingStatus.PENDING and confirming:
            self.status = BookingStatus.CONFIRMED


def slot_window(start_time: time, duration_minutes: int) -> TimeWindow | None:
    """Interval of a slot starting at ``start_time``, or None past midnight."""
    start = to_minutes(start_time)
    end = start + duration_minutes
    if duration_minutes <= 0 or end > MINUTES_PER_DAY:
        return None
    return TimeWindow(start, end)
