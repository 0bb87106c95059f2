"""Clock port.

Date-dependent rules (bookings in the past, payout timestamps, job-lock
leases) read time through this port so tests can pin it.
"""

import abc
from datetime import datetime

# pylint: disable=too-few-public-methods


class Clock(abc.ABC):
    """Contract for a source of the current time."""

    @abc.abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
