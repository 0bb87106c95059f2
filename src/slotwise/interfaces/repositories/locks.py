"""Job lock (single-flight lease) port."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class JobLease:
    """Current holder of a named job lock."""

    name: str
    holder: str
    acquired_at: datetime
    expires_at: datetime


class JobLockRepository(abc.ABC):
    """Contract for named, expiring locks shared by all processes."""

    @abc.abstractmethod
    def acquire(
        self, name: str, holder: str, now: datetime, expires_at: datetime
    ) -> JobLease:
        """Try to take the lock.

        Succeeds when the lock is free or its lease expired before ``now``.

        Returns:
            The lease now in force: the caller's own on success, otherwise the
            other holder's.
        """

    @abc.abstractmethod
    def release(self, name: str, holder: str) -> None:
        """Drop the lock if ``holder`` still holds it."""
