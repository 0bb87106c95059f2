"""Payment ledger handlers.

Each handler locks the booking row, appends exactly one ledger entry, and
rewrites the booking's paid amount and payment status from the ledger, all
in one transaction. Refunds also lock the store owner, the lock the payout
batcher takes before selecting pending entries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from slotwise.config import Settings
from slotwise.domain import errors
from slotwise.domain.booking import Booking
from slotwise.domain.ledger import LedgerEntry, derive_payment, pending_balance
from slotwise.domain.payouts import RefundAfterPayout
from slotwise.domain.value_objects import LedgerDirection
from slotwise.interfaces.clock import Clock
from slotwise.interfaces.errors import DuplicateRecordError
from slotwise.interfaces.id_generator import IdGenerator
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork
from slotwise.service_layer import commands
from slotwise.service_layer.deadlines import Deadline

logger = logging.getLogger(__name__)


def _validate_amount(amount: object) -> int:
    # bool is an int subclass; True is not one paisa
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise errors.InvalidAmountError(amount)
    return amount


def _load_for_update(uow: AbstractUnitOfWork, booking_id: str) -> Booking:
    booking = uow.bookings.get(booking_id, for_update=True)
    if booking is None:
        raise errors.BookingNotFound(booking_id)
    return booking


def _already_recorded(
    uow: AbstractUnitOfWork,
    booking: Booking,
    direction: LedgerDirection,
    amount: int,
    reference: str | None,
) -> bool:
    """True when ``reference`` was already applied to this booking as the same movement."""
    if reference is None:
        return False
    if (existing := uow.ledger.find_by_external_reference(reference)) is None:
        return False
    if (
        existing.booking_id != booking.id
        or existing.direction is not direction
        or existing.amount_minor != amount
    ):
        raise DuplicateRecordError(
            f"external reference {reference} is already recorded as "
            f"{existing.direction.value} {existing.amount_minor} on booking {existing.booking_id}"
        )
    logger.info("Replay of %s %s on booking %s ignored", direction.value, reference, booking.id)
    return True


def _record(  # pylint: disable=too-many-arguments
    uow: AbstractUnitOfWork,
    booking: Booking,
    direction: LedgerDirection,
    amount: int,
    reference: str | None,
    *,
    owner_id: str,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
) -> None:
    now = clock.now()
    uow.ledger.append(
        LedgerEntry(
            id=id_generator.new_id(),
            owner_id=owner_id,
            direction=direction,
            amount_minor=amount,
            booking_id=booking.id,
            external_reference=reference,
            created_at=now,
        )
    )
    state = derive_payment(
        uow.ledger.for_booking(booking.id),
        booking.total_price_minor,
        settings.partial_payment_percent,
    )
    booking.apply_payment_state(
        state, confirm_on_partial=settings.confirm_on_partial, now=now
    )
    uow.bookings.update(booking)


def _owner_of(uow: AbstractUnitOfWork, booking: Booking) -> str:
    if (owner_id := uow.owners.owner_of_store(booking.store_id)) is None:
        raise errors.OwnerNotFound(None, store_id=booking.store_id)
    return owner_id


def apply_capture(
    cmd: commands.ApplyCapture,
    uow: AbstractUnitOfWork,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
) -> Booking:
    """Record a capture and re-derive the booking's payment state.

    Raises:
        InvalidAmountError: Amount is not a positive integer.
        BookingNotFound: Unknown booking.
        BookingNotPayable: The booking is cancelled.
        OverPayment: The capture would exceed the total price.
        RequestTimeout: The deadline passed or the row lock wait timed out.
    """
    amount = _validate_amount(cmd.amount_minor)
    deadline = Deadline.after(clock, cmd.timeout_s, settings.request_timeout_s)

    with uow:
        uow.set_timeout(deadline.remaining())
        booking = _load_for_update(uow, cmd.booking_id)
        deadline.check("capture")

        if _already_recorded(
            uow, booking, LedgerDirection.CAPTURE, amount, cmd.external_reference
        ):
            return booking

        booking.ensure_payable()
        if booking.paid_amount_minor + amount > booking.total_price_minor:
            raise errors.OverPayment(
                booking.id, booking.paid_amount_minor, amount, booking.total_price_minor
            )

        _record(
            uow,
            booking,
            LedgerDirection.CAPTURE,
            amount,
            cmd.external_reference,
            owner_id=_owner_of(uow, booking),
            clock=clock,
            id_generator=id_generator,
            settings=settings,
        )
        uow.commit()

    logger.info(
        "Captured %s on booking %s: paid %s/%s, payment %s, booking %s",
        amount,
        booking.id,
        booking.paid_amount_minor,
        booking.total_price_minor,
        booking.payment_status.value,
        booking.status.value,
    )
    return booking


def apply_refund(
    cmd: commands.ApplyRefund,
    uow: AbstractUnitOfWork,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
) -> Booking:
    """Record a refund and re-derive the booking's payment state.

    A refund may only draw on captures that have not yet been selected for a
    payout; anything else would have to be clawed back from the owner and is
    rejected for manual reconciliation.

    Raises:
        InvalidAmountError: Amount is not a positive integer.
        BookingNotFound: Unknown booking.
        RefundExceedsPaid: The refund is larger than the amount paid.
        RefundAfterPayout: The money is already in flight or paid out.
        RequestTimeout: The deadline passed or the row lock wait timed out.
    """
    amount = _validate_amount(cmd.amount_minor)
    deadline = Deadline.after(clock, cmd.timeout_s, settings.request_timeout_s)

    with uow:
        uow.set_timeout(deadline.remaining())
        booking = _load_for_update(uow, cmd.booking_id)
        deadline.check("refund")

        if _already_recorded(
            uow, booking, LedgerDirection.REFUND, amount, cmd.external_reference
        ):
            return booking

        if amount > booking.paid_amount_minor:
            raise errors.RefundExceedsPaid(booking.id, booking.paid_amount_minor, amount)

        owner_id = _owner_of(uow, booking)
        uow.owners.lock(owner_id)
        refundable = pending_balance(uow.ledger.for_booking(booking.id))
        if amount > refundable:
            logger.warning(
                "Refund of %s on booking %s exceeds the %s not yet paid out",
                amount,
                booking.id,
                refundable,
            )
            raise RefundAfterPayout(owner_id, booking.id, amount, refundable)

        _record(
            uow,
            booking,
            LedgerDirection.REFUND,
            amount,
            cmd.external_reference,
            owner_id=owner_id,
            clock=clock,
            id_generator=id_generator,
            settings=settings,
        )
        uow.commit()

    logger.info(
        "Refunded %s on booking %s: paid %s/%s, payment %s",
        amount,
        booking.id,
        booking.paid_amount_minor,
        booking.total_price_minor,
        booking.payment_status.value,
    )
    return booking


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.ApplyCapture: apply_capture,
    commands.ApplyRefund: apply_refund,
}
