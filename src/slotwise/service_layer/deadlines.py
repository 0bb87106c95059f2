"""Request-scoped deadlines.

A handler starts a `Deadline` when it receives a command, hands the
remaining budget to the unit of work as a lock/statement timeout, and calls
`Deadline.check` between steps so a slow request fails with `RequestTimeout`
instead of finishing late.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from slotwise.interfaces.clock import Clock
from slotwise.interfaces.errors import RequestTimeout


@dataclass(frozen=True)
class Deadline:
    """Point in time after which a request must give up (None = never)."""

    clock: Clock
    expires_at: datetime | None

    @classmethod
    def after(
        cls, clock: Clock, timeout_s: float | None, default_s: float | None = None
    ) -> Deadline:
        """Deadline ``timeout_s`` (or ``default_s``) from now."""
        seconds = timeout_s if timeout_s is not None else default_s
        if seconds is None:
            return cls(clock, None)
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        return cls(clock, clock.now() + timedelta(seconds=seconds))

    def remaining(self) -> float | None:
        """Seconds left, or None for an unbounded request."""
        if self.expires_at is None:
            return None
        return max(0.0, (self.expires_at - self.clock.now()).total_seconds())

    def check(self, step: str = "request") -> None:
        """Raise RequestTimeout once the deadline has passed."""
        if self.expires_at is not None and self.clock.now() >= self.expires_at:
            raise RequestTimeout(f"{step} exceeded its deadline")
