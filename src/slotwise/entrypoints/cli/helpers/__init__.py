"""CLI helpers for SLOTWISE.

Utilities used by the command-line interface: URL sanitization for safe display,
date, time and amount option types, error translation,
and message emitters that write to stderr with emoji→ASCII fallbacks.
"""

from .db_url import sanitize_url
from .errors import reported_errors
from .messages import error, success, warn
from .params import AMOUNT, DATE, TIME

__all__ = [
    "AMOUNT",
    "DATE",
    "TIME",
    "error",
    "reported_errors",
    "sanitize_url",
    "success",
    "warn",
]
