"""Bootstrap the message bus with handlers and unit of work."""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from slotwise import config
from slotwise.adapters.clock import SystemClock
from slotwise.adapters.db.engine import make_engine
from slotwise.adapters.id_generators import ULIDGenerator
from slotwise.adapters.payouts import InMemoryPayoutProvider
from slotwise.adapters.unit_of_work import SqlAlchemyUnitOfWork
from slotwise.interfaces.clock import Clock
from slotwise.interfaces.id_generator import IdGenerator
from slotwise.interfaces.payout_provider import PayoutProvider
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork
from slotwise.service_layer.handlers import COMMAND_HANDLERS, PAYOUT_COMMAND_HANDLERS
from slotwise.service_layer.messagebus import MessageBus

if TYPE_CHECKING:
    from slotwise.service_layer.commands import Command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    message_bus: MessageBus
    settings: config.Settings
    clock: Clock

    @property
    def uow(self) -> AbstractUnitOfWork:
        """The unit of work shared by handlers and queries."""
        return self.message_bus.uow


def build_write_uow(url: str, settings: config.Settings | None = None) -> AbstractUnitOfWork:
    """Build a new unit of work for write operations.

    The request timeout doubles as the SQLite busy timeout so a blocked
    writer gives up no later than a request would.
    """
    settings = settings or config.Settings()
    if settings.request_timeout_s is not None:
        engine = make_engine(url, lock_timeout_s=settings.request_timeout_s)
    else:
        engine = make_engine(url)
    return SqlAlchemyUnitOfWork(engine)


def bootstrap_queries(settings: config.Settings | None = None) -> AbstractUnitOfWork:
    """Unit of work for read-side queries, built from ``SLOTWISE_DB_URL``."""
    return build_write_uow(config.get_db_url(), settings or config.Settings.from_env())


def build_message_bus(  # pylint: disable=too-many-arguments
    uow: AbstractUnitOfWork,
    command_handlers: dict[type[Command], Callable[..., Any]],
    *,
    clock: Clock,
    id_generator: IdGenerator,
    settings: config.Settings,
    payout_provider: PayoutProvider | None,
) -> MessageBus:
    """Build a message bus with injected dependencies."""
    dependencies = {
        "uow": uow,
        "clock": clock,
        "id_generator": id_generator,
        "settings": settings,
        "payout_provider": payout_provider,
    }
    injected_command_handlers = {
        command_type: inject_dependencies(handler, dependencies)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        uow,
        command_handlers=injected_command_handlers,
    )


def bootstrap(  # pylint: disable=too-many-arguments
    *,
    uow: AbstractUnitOfWork | None = None,
    settings: config.Settings | None = None,
    clock: Clock | None = None,
    id_generator: IdGenerator | None = None,
    payout_provider: PayoutProvider | None = None,
    payouts: bool = True,
) -> AppContainer:
    """Bootstrap the message bus with handlers and unit of work.

    Anything not passed in is built from the environment: the database from
    ``SLOTWISE_DB_URL`` and the settings from the other ``SLOTWISE_*``
    variables.

    With ``payouts=False`` the payout commands are left unregistered and no
    payout provider is needed, for entry points that only book and take
    payments.

    Raises:
        DatabaseUrlNotSetError: No ``uow`` given and ``SLOTWISE_DB_URL`` unset.
        InvalidSettingError: A ``SLOTWISE_*`` variable cannot be parsed.
        PayoutProviderNotConfiguredError: ``payouts`` is on, no
            ``payout_provider`` given and ``SLOTWISE_PAYOUT_SANDBOX`` is off.
    """
    settings = settings or config.Settings.from_env()
    uow = uow or build_write_uow(config.get_db_url(), settings)
    clock = clock or SystemClock(settings.tzinfo)
    handlers = COMMAND_HANDLERS
    if not payouts:
        handlers = {
            command: handler
            for command, handler in COMMAND_HANDLERS.items()
            if command not in PAYOUT_COMMAND_HANDLERS
        }
    elif payout_provider is None:
        if not settings.payout_sandbox:
            raise config.PayoutProviderNotConfiguredError(
                "No payout provider is configured; set SLOTWISE_PAYOUT_SANDBOX=1 "
                "to use the in-memory sandbox, where no money moves."
            )
        logger.warning(
            "SLOTWISE_PAYOUT_SANDBOX is on; payouts go to the in-memory sandbox"
        )
        payout_provider = InMemoryPayoutProvider()

    message_bus = build_message_bus(
        uow,
        handlers,
        clock=clock,
        id_generator=id_generator or ULIDGenerator(),
        settings=settings,
        payout_provider=payout_provider,
    )
    return AppContainer(message_bus=message_bus, settings=settings, clock=clock)


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Inject dependencies into a handler function based on its parameters."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return functools.partial(handler, **deps)
