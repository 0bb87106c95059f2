"""SLOTWISE CLI entry point.

Defines the top-level ``slotwise`` command (via Click-Extra) and registers
the subcommand groups.

Available commands
- ``slotwise db``: forward-only database management (upgrade/current/heads/history/status).
- ``slotwise availability``: open windows and bookable slots of a store.
- ``slotwise payments``: record captures and refunds, show what a booking owes.
- ``slotwise payouts``: daily payout batch and reconciliation.

Examples
    $ slotwise --version
    $ slotwise db upgrade
    $ slotwise availability st_1 2025-01-06 --service svc_cut
    $ slotwise payments capture bk_1 500.00 --reference pay_123
    $ slotwise payouts run
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from slotwise import __version__
from slotwise.config import InvalidSettingError, Settings
from slotwise.logging import config_console_handler, config_flight_recorder, log_startup

from .availability import availability as availability_command
from .db import db as db_group
from .helpers.log_level_parser import parse_log_level
from .payments import payments as payments_group
from .payouts import payouts as payouts_group

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """SLOTWISE command-line interface.

    SLOTWISE is the booking core of a salon marketplace: it resolves store
    and employee opening hours, books slots without double-booking, tracks
    partial and full payments in an append-only ledger, and pays each store
    owner their pending balance once a day.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Raise console verbosity one level above WARNING per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Lower console verbosity one level below WARNING per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (tracebacks with locals, file paths in log lines).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path the flight recorder dumps to.",
    default=Path(user_log_dir("slotwise", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="SLOTWISE_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="SLOTWISE_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last N log records at DEBUG in memory and write them to "
        "--log-path when a WARNING or worse occurs, such as a failed payout. "
        "Console verbosity is unchanged."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help="Also write the flight recorder buffer to --log-path on a clean exit.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set the minimum LEVEL of logger NAME (NAME=LEVEL), for both console "
        "and flight recorder. Repeatable (e.g. -L sqlalchemy=INFO "
        "-L slotwise.service_layer=DEBUG) or via SLOTWISE_LOGGER_LEVELS."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def slotwise(  # pylint: disable=too-many-arguments, too-many-locals, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """SLOTWISE command-line interface."""

    # 0) compute effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) console
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    )

    # 2) flight recorder; serve appends so earlier days survive a restart
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
                append=ctx.invoked_subcommand == "payouts",
            )
        )

    # 3) root logger
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) per-logger levels
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    # 5) startup summary; invalid settings are reported by the subcommand
    try:
        settings = Settings.from_env()
    except InvalidSettingError:
        settings = None
    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        logger_levels=logger_levels,
        settings=settings,
    )

    # 6) flush and close handlers after the command returns
    ctx.call_on_close(logging.shutdown)


slotwise.add_command(db_group)
slotwise.add_command(availability_command)
slotwise.add_command(payments_group)
slotwise.add_command(payouts_group)
