"""Ledger entries and the payment state they imply.

A booking's paid amount and payment status are never set directly: they are
recomputed from the booking's ledger entries with `derive_payment` whenever a
new entry is appended. Each entry is a tagged variant (`LedgerDirection`) and
every summation below matches exhaustively over the variants.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .value_objects import LedgerDirection, PaymentStatus, PayoutStatus

DEFAULT_PARTIAL_PAYMENT_PERCENT = 50  # pragma: no mutate


@dataclass(frozen=True)
class LedgerEntry:
    """An immutable record of one monetary movement.

    ``amount_minor`` is always positive; the direction carries the sign.
    Payout entries aggregate many bookings and therefore have no booking.
    """

    id: str
    owner_id: str
    direction: LedgerDirection
    amount_minor: int
    booking_id: str | None = None
    payout_status: PayoutStatus = PayoutStatus.PENDING
    payout_id: str | None = None
    provider_reference: str | None = None
    external_reference: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.amount_minor <= 0:
            raise ValueError("ledger amounts are positive; direction carries the sign")
        if self.direction is not LedgerDirection.PAYOUT and self.booking_id is None:
            raise ValueError(f"{self.direction.value} entries must name a booking")

    @property
    def signed_amount(self) -> int:
        """Amount owed to the owner by this entry (payouts settle, so count zero)."""
        match self.direction:
            case LedgerDirection.CAPTURE:
                return self.amount_minor
            case LedgerDirection.REFUND:
                return -self.amount_minor
            case LedgerDirection.PAYOUT:
                return 0


@dataclass(frozen=True)
class PaymentState:
    """Payment fields of a booking as implied by its ledger."""

    paid_minor: int
    status: PaymentStatus


def paid_amount(entries: Iterable[LedgerEntry]) -> int:
    """Sum of captures minus refunds."""
    total = 0
    for entry in entries:
        match entry.direction:
            case LedgerDirection.CAPTURE:
                total += entry.amount_minor
            case LedgerDirection.REFUND:
                total -= entry.amount_minor
            case LedgerDirection.PAYOUT:
                pass
    return total


def meets_threshold(paid_minor: int, total_minor: int, percent: int) -> bool:
    """True when ``paid`` is at least ``percent``% of ``total`` (exact integer test)."""
    return paid_minor * 100 >= total_minor * percent


def derive_payment(
    entries: Iterable[LedgerEntry],
    total_minor: int,
    partial_percent: int = DEFAULT_PARTIAL_PAYMENT_PERCENT,
) -> PaymentState:
    """Derive paid amount and payment status from a booking's ledger entries.

    Rules:
        - paid == total → FULL
        - paid reaches the partial threshold → PARTIAL
        - after any refund, a non-zero remainder is PARTIAL and zero is REFUNDED
        - otherwise PENDING (captures below the threshold are recorded but do
          not change the status)
    """
    entries = list(entries)
    paid = paid_amount(entries)
    refunded = any(e.direction is LedgerDirection.REFUND for e in entries)

    if paid > 0 and paid == total_minor:
        status = PaymentStatus.FULL
    elif paid == 0:
        status = PaymentStatus.REFUNDED if refunded else PaymentStatus.PENDING
    elif refunded or meets_threshold(paid, total_minor, partial_percent):
        status = PaymentStatus.PARTIAL
    else:
        status = PaymentStatus.PENDING
    return PaymentState(paid_minor=paid, status=status)


def pending_balance(entries: Iterable[LedgerEntry]) -> int:
    """Signed sum of the entries not yet selected for a payout.

    For an owner this is the amount the next payout would carry. For a single
    booking it is the most that can be refunded without touching money that is
    already in flight or paid out.
    """
    return sum(
        entry.signed_amount
        for entry in entries
        if entry.payout_status is PayoutStatus.PENDING
    )
