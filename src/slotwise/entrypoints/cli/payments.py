"""``slotwise payments``: record gateway captures and refunds by hand.

The gateway callback normally sends these commands; the CLI covers missed
callbacks and support desk refunds. AMOUNT is in major units (``499.50``)
and passing the gateway id as ``--reference`` makes a retry a no-op.
"""

from __future__ import annotations

import click
import click_extra as clickx
from rich.console import Console
from rich.table import Table

from slotwise.bootstrap import bootstrap
from slotwise.domain.booking import Booking
from slotwise.domain.money import format_minor
from slotwise.service_layer import commands, queries

from .helpers import AMOUNT, reported_errors, success


def _recorded(verb: str, booking: Booking, amount_minor: int) -> None:
    success(
        f"{verb} {format_minor(amount_minor)} on {booking.id}: paid "
        f"{format_minor(booking.paid_amount_minor)} of "
        f"{format_minor(booking.total_price_minor)} "
        f"({booking.payment_status.value}, booking {booking.status.value})."
    )


@click.group(cls=clickx.ExtraGroup)
def payments() -> None:
    """Booking payment commands."""


@payments.command()
@click.argument("booking_id")
@click.argument("amount_minor", metavar="AMOUNT", type=AMOUNT)
@click.option("--reference", "external_reference", help="Gateway payment id.")
def capture(booking_id: str, amount_minor: int, external_reference: str | None) -> None:
    """Record a captured payment of AMOUNT for BOOKING_ID."""
    with reported_errors():
        app = bootstrap(payouts=False)
        booking = app.message_bus.handle(
            commands.ApplyCapture(booking_id, amount_minor, external_reference)
        )
    _recorded("Captured", booking, amount_minor)


@payments.command()
@click.argument("booking_id")
@click.argument("amount_minor", metavar="AMOUNT", type=AMOUNT)
@click.option("--reference", "external_reference", help="Gateway refund id.")
def refund(booking_id: str, amount_minor: int, external_reference: str | None) -> None:
    """Record a refund of AMOUNT for BOOKING_ID."""
    with reported_errors():
        app = bootstrap(payouts=False)
        booking = app.message_bus.handle(
            commands.ApplyRefund(booking_id, amount_minor, external_reference)
        )
    _recorded("Refunded", booking, amount_minor)


@payments.command()
@click.argument("booking_id")
def show(booking_id: str) -> None:
    """Show what BOOKING_ID costs, has paid and still owes."""
    with reported_errors():
        app = bootstrap(payouts=False)
        summary = queries.payment_summary(app.uow, booking_id)
    table = Table(title=f"Booking {summary.booking_id} ({summary.status.value})")
    table.add_column("Total", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Payment")
    table.add_row(
        format_minor(summary.total_minor),
        format_minor(summary.paid_minor),
        format_minor(summary.remaining_minor),
        summary.payment_status.value,
    )
    Console().print(table)
