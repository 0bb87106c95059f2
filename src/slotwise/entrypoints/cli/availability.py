"""``slotwise availability``: open windows and bookable slots of a store."""

from __future__ import annotations

from datetime import date, datetime

import click
from rich.console import Console
from rich.table import Table

from slotwise.bootstrap import bootstrap_queries
from slotwise.config import Settings
from slotwise.service_layer import queries

from .helpers import DATE, reported_errors


@click.command()
@click.argument("store_id")
@click.argument("day", metavar="DATE", type=DATE)
@click.option("--employee", "employee_id", help="Narrow to one employee's hours.")
@click.option(
    "--service",
    "store_service_id",
    help="Also list start times this service can still be booked at.",
)
@click.option(
    "--step",
    "step_minutes",
    type=click.IntRange(min=1),
    default=queries.DEFAULT_STEP_MINUTES,
    show_default=True,
    help="Minutes between candidate start times.",
)
def availability(
    store_id: str,
    day: date,
    employee_id: str | None,
    store_service_id: str | None,
    step_minutes: int,
) -> None:
    """Show the open windows of STORE_ID on DATE (YYYY-MM-DD)."""
    console = Console()
    with reported_errors():
        settings = Settings.from_env()
        uow = bootstrap_queries(settings)
        windows = queries.resolve_windows(uow, store_id, day, employee_id)
        slots = None
        if store_service_id is not None:
            slots = queries.list_open_slots(
                uow,
                store_id,
                store_service_id,
                day,
                employee_id,
                step_minutes=step_minutes,
                now=datetime.now(settings.tzinfo),
                tz=settings.tzinfo,
            )

    who = f"employee {employee_id} at " if employee_id else ""
    if not windows:
        console.print(f"{who}store {store_id} is closed on {day:%A %Y-%m-%d}.")
        return

    table = Table(title=f"{who}store {store_id}, {day:%A %Y-%m-%d}")
    table.add_column("Opens")
    table.add_column("Closes")
    for window in windows:
        table.add_row(f"{window.start_time:%H:%M}", f"{window.end_time:%H:%M}")
    console.print(table)

    if slots is not None:
        if slots:
            console.print(
                "Open slots: " + ", ".join(f"{s.start_time:%H:%M}" for s in slots)
            )
        else:
            console.print("No open slots for this service.")
