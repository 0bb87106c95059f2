"""Logging helpers used by the SLOTWISE CLI and application.

This module provides utilities for configuring console logging with Rich
and an in-memory "flight recorder" that buffers log records and writes them
to disk on flush. It also provides a filter that annotates third-party
log records with a short prefix used by console formatting.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import alembic
import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

    from slotwise.config import Settings

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "slotwise"


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records from other libraries with their top-level package name.

    ``sqlalchemy.engine.Engine`` becomes ``[sqlalchemy]``; slotwise records
    get an empty prefix. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the stderr console handler.

    Args:
        level: Minimum level shown (forced to DEBUG in debug mode).
        debug_mode: Show timestamps, logger names and source links.
        color: Mirrors click-extra's ``--color/--no-color``.

    Returns:
        RichHandler: Handler ready to attach to the root logger.
    """
    ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
    append: bool = False,
) -> MemoryHandler:
    """Buffer up to ``capacity`` records in memory and dump them to ``path``.

    The buffer is written out when a record at ``flush_level`` or above
    arrives (a failed payout, a store outage), when it fills up, or on close
    if ``flush_on_close`` is set. ``append`` keeps earlier dumps, which suits
    the long-running ``payouts serve`` loop.
    """
    file_handler = logging.FileHandler(path, mode="a" if append else "w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(process)d:%(threadName)s] %(levelname)s %(name)s:%(lineno)d: %(message)s"
        )
    )
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    flight_recorder: bool,
    flight_capacity: int | None,
    logger_levels: dict[str, int],
    settings: Settings | None = None,
) -> None:
    """Log a one-line startup summary at INFO and diagnostics at DEBUG.

    The diagnostics cover interpreter, platform and library versions, the
    active handlers, the flight recorder, per-logger overrides and, when
    given, the business settings in force (payment threshold, payout
    schedule and currency).
    """

    logger.info(
        "SLOTWISE %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if flight_recorder else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug("Alembic: %s", alembic.__version__)
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s",
            str(log_path) if log_path else "<none>",
            flight_capacity,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
    if settings is not None:
        logger.debug(
            "Payments: partial at %s%%, confirm_on_partial=%s",
            settings.partial_payment_percent,
            settings.confirm_on_partial,
        )
        logger.debug(
            "Payouts: daily at %s %s, currency=%s, max_attempts=%s, lease=%ss, sandbox=%s",
            settings.payout_time.strftime("%H:%M"),
            settings.timezone,
            settings.payout_currency,
            settings.max_payout_attempts,
            settings.payout_lease_seconds,
            settings.payout_sandbox,
        )
