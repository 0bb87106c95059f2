"""Service layer handlers."""

from collections.abc import Callable
from typing import Any

from .booking_handlers import COMMAND_HANDLERS as BOOKING_COMMAND_HANDLERS
from .payment_handlers import COMMAND_HANDLERS as PAYMENT_COMMAND_HANDLERS
from .payout_handlers import COMMAND_HANDLERS as PAYOUT_COMMAND_HANDLERS

__all__ = ["COMMAND_HANDLERS", "PAYOUT_COMMAND_HANDLERS"]

COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    **BOOKING_COMMAND_HANDLERS,
    **PAYMENT_COMMAND_HANDLERS,
    **PAYOUT_COMMAND_HANDLERS,
}
