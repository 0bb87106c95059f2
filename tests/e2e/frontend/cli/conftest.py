"""Fixtures and test helpers for end-to-end CLI tests.

Provides a test-only `log-demo` Click command that emits structured log
messages, fixtures to register that command, obtain a CliRunner, and run
tests within an isolated filesystem, plus a migrated and seeded SQLite file
for the commands that need a database.
"""

import logging
from datetime import time

import click
import pytest
from alembic import command
from click.testing import CliRunner

from slotwise import config
from slotwise.adapters.clock import FixedClock
from slotwise.adapters.db.engine import make_engine
from slotwise.adapters.payouts import InMemoryPayoutProvider
from slotwise.bootstrap import bootstrap, build_write_uow
from slotwise.config import Settings
from slotwise.entrypoints.cli.main import slotwise
from slotwise.service_layer import commands
from tests.fixtures.datagen import CUT, MONDAY, NOW, STORE

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Emit representative log messages for CLI/flight-recorder tests.

    Emits DEBUG/INFO/WARNING/ERROR/CRITICAL messages on the 'slotwise.demo'
    logger and additional messages on a 'some.thirdparty' logger to exercise
    logger-level filtering and flight-recorder behavior.
    """
    logger = logging.getLogger("slotwise.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and its internal sections.

    Ensures the test-only command is removed from the group and any internal
    registries Click may use so cleanup is robust across Click versions.
    """
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command for the duration of a test.

    Adds the command to the top-level `slotwise` group before the test and
    removes it afterwards to avoid leaking test commands between tests.
    """
    slotwise.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(slotwise, "log-demo")


# 2) Fixture for a runner
@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


# 3) Fixture for an isolated filesystem per test
@pytest.fixture
def fs(runner):
    """Provide an isolated filesystem context for tests using CliRunner.

    Uses runner.isolated_filesystem() to ensure filesystem side-effects are
    confined to the test.
    """
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def salon_db_url(tmp_path, seed_salon):
    """URL of a migrated SQLite file holding the salon world."""
    url = f"sqlite+pysqlite:///{tmp_path / 'salon.db'}"
    command.upgrade(config.build_alembic_config(url), "head")
    engine = make_engine(url)
    seed_salon(engine)
    engine.dispose()
    return url


@pytest.fixture
def cli_env(salon_db_url, tmp_path):
    """Environment for CLI runs against `salon_db_url`."""
    return {
        "SLOTWISE_DB_URL": salon_db_url,
        "SLOTWISE_LOG_PATH": str(tmp_path / "flight.log"),
        "SLOTWISE_TIMEZONE": "UTC",
        "SLOTWISE_PAYOUT_SANDBOX": "1",
    }


@pytest.fixture
def paid_booking(salon_db_url):
    """Book the Monday 09:00 haircut and capture it in full, straight through the bus."""
    app = bootstrap(
        uow=build_write_uow(salon_db_url),
        settings=Settings(),
        clock=FixedClock(NOW),
        payout_provider=InMemoryPayoutProvider(),
    )
    bus = app.message_bus
    booking = bus.handle(commands.BookSlot("cus_1", STORE, CUT.id, MONDAY, time(9, 0)))
    bus.handle(commands.ApplyCapture(booking.id, CUT.price_minor, "pay_1"))
    return booking


@pytest.fixture
def booked(salon_db_url):
    """The Monday 09:00 haircut, booked but not yet paid."""
    app = bootstrap(
        uow=build_write_uow(salon_db_url),
        settings=Settings(),
        clock=FixedClock(NOW),
        payouts=False,
    )
    return app.message_bus.handle(
        commands.BookSlot("cus_1", STORE, CUT.id, MONDAY, time(9, 0))
    )
