"""``slotwise payouts``: run, schedule and reconcile owner payouts.

``run`` performs one batch and exits, for a cron entry; ``serve`` stays up
and runs the batch daily at ``SLOTWISE_PAYOUT_TIME``. ``release`` and
``settle`` are the operator side of manual reconciliation.

Exit codes: 0 when every owner was paid or had nothing due, 1 when the run
was rejected (e.g. another run holds the lease), 4 when some owners need
attention.
"""

from __future__ import annotations

import logging
import signal
import threading
from datetime import time

import click
import click_extra as clickx
from rich.console import Console
from rich.table import Table

from slotwise.bootstrap import bootstrap
from slotwise.domain.money import format_minor
from slotwise.domain.payouts import BatchAlreadyRunning
from slotwise.service_layer import commands
from slotwise.service_layer.payout_report import OwnerOutcome, PayoutRunReport
from slotwise.service_layer.scheduling import run_daily

from .helpers import TIME, reported_errors, success, warn

logger = logging.getLogger(__name__)

EXIT_NEEDS_ATTENTION = 4

_OUTCOME_STYLES = {
    OwnerOutcome.PAID: "green",
    OwnerOutcome.FAILED: "yellow",
    OwnerOutcome.RECONCILE: "red",
    OwnerOutcome.ERROR: "red",
    OwnerOutcome.HELD: "magenta",
}


def render_report(report: PayoutRunReport, console: Console) -> None:
    """Print one row per recovered batch and per owner."""
    table = Table(title=f"Payout run by {report.holder}")
    table.add_column("Owner")
    table.add_column("Outcome")
    table.add_column("Amount", justify="right")
    table.add_column("Payout")
    table.add_column("Reference")
    table.add_column("Detail", overflow="fold")
    for label, rows in (("recovered", report.recovered), (None, report.results)):
        for r in rows:
            style = _OUTCOME_STYLES.get(r.outcome, "")
            outcome = f"[{style}]{r.outcome.value}[/]" if style else r.outcome.value
            if label:
                outcome += f" ({label})"
            table.add_row(
                r.owner_id,
                outcome,
                format_minor(r.amount_minor) if r.amount_minor else "",
                r.payout_id or "",
                r.provider_reference or "",
                r.detail or "",
            )
    console.print(table)
    console.print(
        f"Paid {len(report.paid)} owner(s), total {format_minor(report.paid_total_minor)}."
    )


@click.group(cls=clickx.ExtraGroup)
def payouts() -> None:
    """Owner payout commands."""


@payouts.command()
@click.option(
    "--holder",
    help="Lease holder name recorded in job_locks (default: host:pid).",
)
def run(holder: str | None) -> None:
    """Run one payout batch now."""
    console = Console()
    with reported_errors():
        app = bootstrap()
        report = app.message_bus.handle(commands.RunPayoutBatch(holder=holder))
    render_report(report, console)
    if report.needs_attention:
        warn(f"{len(report.needs_attention)} payout(s) need attention.")
        raise SystemExit(EXIT_NEEDS_ATTENTION)
    success("Payout run complete.")


@payouts.command()
@click.option(
    "--at",
    "at",
    type=TIME,
    help="Wall-clock time of the daily run (default: SLOTWISE_PAYOUT_TIME).",
)
def serve(at: time | None) -> None:
    """Run the payout batch every day until interrupted."""
    console = Console()
    with reported_errors():
        app = bootstrap()
    at = at or app.settings.payout_time
    stop = threading.Event()

    def _stop(signum, frame):  # pylint: disable=unused-argument
        logger.info("Signal %s received; stopping payout scheduler", signum)
        stop.set()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    def job() -> None:
        try:
            report = app.message_bus.handle(commands.RunPayoutBatch())
        except BatchAlreadyRunning as e:
            logger.warning("%s", e)
            return
        render_report(report, console)

    console.print(f"Payouts scheduled daily at {at:%H:%M} {app.settings.timezone}.")
    run_daily(job, at=at, clock=app.clock, tz=app.settings.tzinfo, stop=stop)


@payouts.command()
@click.argument("owner_id")
def release(owner_id: str) -> None:
    """Make OWNER_ID's reconciled entries payable again."""
    with reported_errors():
        app = bootstrap()
        released = app.message_bus.handle(commands.ReleaseReconciliation(owner_id))
    success(f"Released {released} entr{'y' if released == 1 else 'ies'} of {owner_id}.")


@payouts.command()
@click.argument("payout_id")
@click.option(
    "--reference",
    "provider_reference",
    help="Provider reference proving the payout was made; omit if it was not.",
)
def settle(payout_id: str, provider_reference: str | None) -> None:
    """Close PAYOUT_ID after checking its outcome with the provider."""
    with reported_errors():
        app = bootstrap()
        batch = app.message_bus.handle(
            commands.SettleReconciledPayout(payout_id, provider_reference)
        )
    success(f"Payout {batch.id} is {batch.status.value}.")
