"""Message bus routing commands to their handlers."""

import logging
from collections.abc import Callable
from typing import Any

from slotwise.domain.errors import DomainError
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork

from .commands import Command

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class NoHandlerForCommand(LookupError):
    """Exception raised when no handler is found for a command."""

    def __init__(self, cmd: Command) -> None:
        super().__init__(f"No handler found for command {type(cmd).__name__}")


class MessageBus:
    """Synchronous command dispatcher and the entrypoint to the service layer.

    Args:
        uow: The unit of work injected into the handlers, also exposed here so
            callers can run read-only queries against the same store.
        command_handlers: Mapping of command type to a callable taking only the
            command; other dependencies are bound by the bootstrap.
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        command_handlers: dict[type[Command], Callable[..., Any]],
    ) -> None:
        self.uow = uow
        self._command_handlers = command_handlers

    def handle(self, cmd: Command) -> Any:
        """Dispatch ``cmd`` and return whatever its handler returns.

        Raises:
            NoHandlerForCommand: If no handler is registered for the command type.
            Exception: Whatever the handler raises, re-raised unchanged.
        """
        if not (handler := self._command_handlers.get(type(cmd))):
            logger.error("No handler found for command %s", type(cmd).__name__)
            raise NoHandlerForCommand(cmd)

        handler_name = self._get_handler_name(handler)
        logger.debug("Handling command %s with handler %s", cmd, handler_name)
        try:
            return handler(cmd)
        except DomainError as e:
            logger.info("%s rejected: %s", type(cmd).__name__, e)
            raise
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Exception handling command %s with handler %s", cmd, handler_name
            )
            raise

    @staticmethod
    def _get_handler_name(fn: Callable[..., Any]) -> str:
        if hasattr(fn, "__name__"):
            return fn.__name__
        if hasattr(fn, "func") and hasattr(fn.func, "__name__"):
            return fn.func.__name__
        return repr(fn)
