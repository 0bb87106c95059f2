"""Domain-layer error definitions."""

from __future__ import annotations

from datetime import date, time

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


class InvalidTransitionError(DomainError):
    """Raised when an aggregate is in an invalid state for the attempted action."""

    def __init__(self, booking_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Booking {booking_id} cannot move from {current} to {requested}."
        )
        self.booking_id = booking_id
        self.current = current
        self.requested = requested


class InvalidAmountError(DomainError, ValueError):
    """Raised when a monetary amount is not a positive integer of minor units."""

    def __init__(self, amount: object) -> None:
        super().__init__(f"Amount must be a positive integer of minor units, got {amount!r}.")
        self.amount = amount


# ============================================================================
#                           Lookup errors
# ============================================================================


class StoreServiceNotFound(DomainError, LookupError):
    """Raised when a store service does not exist or belongs to another store."""

    def __init__(self, store_service_id: str, store_id: str) -> None:
        super().__init__(
            f"Service {store_service_id} is not offered by store {store_id}."
        )
        self.store_service_id = store_service_id
        self.store_id = store_id


class BookingNotFound(DomainError, LookupError):
    """Raised when a booking id is unknown."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking {booking_id} does not exist.")
        self.booking_id = booking_id


class OwnerNotFound(DomainError, LookupError):
    """Raised when an owner id is unknown, or a store has no owner."""

    def __init__(self, owner_id: str | None, store_id: str | None = None) -> None:
        subject = f"Owner {owner_id}" if owner_id else f"The owner of store {store_id}"
        super().__init__(f"{subject} does not exist.")
        self.owner_id = owner_id
        self.store_id = store_id


# ============================================================================
#                   Slot allocation errors
# ============================================================================


class ServiceInactive(DomainError):
    """Raised when booking a service whose active flag is off."""

    def __init__(self, store_service_id: str) -> None:
        super().__init__(f"Service {store_service_id} is not currently offered.")
        self.store_service_id = store_service_id


class OutsideHours(DomainError):
    """Raised when a requested slot does not fit inside one open window."""

    def __init__(self, booking_date: date, start: time, end: time | None) -> None:
        shown_end = end.strftime("%H:%M") if end is not None else "next day"
        super().__init__(
            f"{booking_date.isoformat()} {start:%H:%M}-{shown_end} is outside opening hours."
        )
        self.booking_date = booking_date
        self.start = start
        self.end = end


class SlotUnavailable(DomainError):
    """Raised when a requested slot overlaps an existing booking."""

    def __init__(self, booking_date: date, start: time, end: time) -> None:
        super().__init__(
            f"{booking_date.isoformat()} {start:%H:%M}-{end:%H:%M} is already booked."
        )
        self.booking_date = booking_date
        self.start = start
        self.end = end


class BookingInPast(DomainError):
    """Raised when a requested slot starts before the current time."""

    def __init__(self, booking_date: date, start: time) -> None:
        super().__init__(
            f"Cannot book {booking_date.isoformat()} {start:%H:%M}: it is in the past."
        )
        self.booking_date = booking_date
        self.start = start


# ============================================================================
#                   Payment ledger errors
# ============================================================================


class OverPayment(DomainError):
    """Raised when a capture would push the paid amount above the total price."""

    def __init__(self, booking_id: str, paid: int, amount: int, total: int) -> None:
        super().__init__(
            f"Capturing {amount} on booking {booking_id} exceeds its total "
            f"({paid} of {total} already paid)."
        )
        self.booking_id = booking_id
        self.paid = paid
        self.amount = amount
        self.total = total


class RefundExceedsPaid(DomainError):
    """Raised when a refund is larger than the amount paid so far."""

    def __init__(self, booking_id: str, paid: int, amount: int) -> None:
        super().__init__(
            f"Refunding {amount} on booking {booking_id} exceeds the paid amount {paid}."
        )
        self.booking_id = booking_id
        self.paid = paid
        self.amount = amount


class BookingNotPayable(DomainError):
    """Raised when a payment targets a booking that can no longer take money."""

    def __init__(self, booking_id: str, status: str) -> None:
        super().__init__(f"Booking {booking_id} is {status} and cannot take payments.")
        self.booking_id = booking_id
        self.status = status
