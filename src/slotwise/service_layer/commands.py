"""Module defining Commands.

Amounts are integer minor units. ``timeout_s`` bounds how long a command may
wait on locks and the store; None falls back to the configured default.
"""

from dataclasses import dataclass
from datetime import date, time

# pylint: disable=too-many-instance-attributes


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


# ============================================================================
#                           Bookings
# ============================================================================


@dataclass(frozen=True)
class BookSlot(Command):
    """Reserve ``start_time`` on ``booking_date`` for one store service."""

    customer_id: str
    store_id: str
    store_service_id: str
    booking_date: date
    start_time: time
    employee_id: str | None = None
    notes: str | None = None
    timeout_s: float | None = None


@dataclass(frozen=True)
class ConfirmBooking(Command):
    """Confirm a PENDING booking without waiting for payment."""

    booking_id: str


@dataclass(frozen=True)
class CompleteBooking(Command):
    """Mark a CONFIRMED booking as served."""

    booking_id: str


@dataclass(frozen=True)
class CancelBooking(Command):
    """Cancel a booking and free its slot."""

    booking_id: str


# ============================================================================
#                           Payments
# ============================================================================


@dataclass(frozen=True)
class ApplyCapture(Command):
    """Record money received for a booking.

    ``external_reference`` is the gateway's payment id; replays with the same
    reference are no-ops.
    """

    booking_id: str
    amount_minor: int
    external_reference: str | None = None
    timeout_s: float | None = None


@dataclass(frozen=True)
class ApplyRefund(Command):
    """Record money returned to the customer of a booking."""

    booking_id: str
    amount_minor: int
    external_reference: str | None = None
    timeout_s: float | None = None


# ============================================================================
#                           Payouts
# ============================================================================


@dataclass(frozen=True)
class RunPayoutBatch(Command):
    """Pay every owner their pending balance (one daily run)."""

    holder: str | None = None


@dataclass(frozen=True)
class ReleaseReconciliation(Command):
    """Return an owner's flagged entries to PENDING and reset their failures."""

    owner_id: str


@dataclass(frozen=True)
class SettleReconciledPayout(Command):
    """Resolve a batch left in RECONCILE after checking with the provider.

    With ``provider_reference`` the batch is recorded as paid; without it the
    batch is recorded as failed and its entries become payable again.
    """

    payout_id: str
    provider_reference: str | None = None
