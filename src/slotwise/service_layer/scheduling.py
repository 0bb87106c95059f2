"""Daily scheduling for the payout run."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, time, timedelta, tzinfo

from slotwise.interfaces.clock import Clock

logger = logging.getLogger(__name__)


def next_daily_run(now: datetime, at: time, tz: tzinfo | None = None) -> datetime:
    """First occurrence of wall-clock ``at`` strictly after ``now``.

    ``at`` is read in ``tz`` (default: ``now``'s own zone), so a run at 00:00
    in Asia/Kolkata happens at local midnight whatever zone ``now`` carries.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    local = now.astimezone(tz) if tz is not None else now
    candidate = datetime.combine(local.date(), at, tzinfo=local.tzinfo)
    if candidate <= local:
        candidate = datetime.combine(
            local.date() + timedelta(days=1), at, tzinfo=local.tzinfo
        )
    return candidate


def run_daily(  # pylint: disable=too-many-arguments
    job: Callable[[], object],
    *,
    at: time,
    clock: Clock,
    tz: tzinfo | None = None,
    stop: threading.Event | None = None,
    max_runs: int | None = None,
    wait: Callable[[float], bool] | None = None,
) -> int:
    """Call ``job`` every day at ``at`` until ``stop`` is set.

    Exceptions from ``job`` are logged and the loop waits for the next day.
    ``wait(seconds)`` sleeps and returns True to stop early; it defaults to
    ``stop.wait``.

    Returns:
        Number of times ``job`` was called.
    """
    stop = stop or threading.Event()
    wait = wait or stop.wait
    runs = 0
    while not stop.is_set() and (max_runs is None or runs < max_runs):
        due = next_daily_run(clock.now(), at, tz)
        logger.info("Next payout run at %s", due.isoformat())
        while (remaining := (due - clock.now()).total_seconds()) > 0:
            if wait(remaining):
                return runs
        try:
            job()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Scheduled run failed")
        runs += 1
    return runs
