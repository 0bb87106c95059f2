"""Unit of Work interface for SLOTWISE.

Defines the AbstractUnitOfWork contract: a context-managed unit of work
exposing every repository over one transaction, with abstract
commit/rollback methods.
"""

from __future__ import annotations

import abc

from .repositories import (
    BookingRepository,
    JobLockRepository,
    LedgerRepository,
    OwnerRepository,
    PayoutRepository,
    ScheduleRepository,
)


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work."""

    schedules: ScheduleRepository
    bookings: BookingRepository
    ledger: LedgerRepository
    owners: OwnerRepository
    payouts: PayoutRepository
    job_locks: JobLockRepository

    def __enter__(self) -> AbstractUnitOfWork:
        """Enter the unit of work context and return the unit.

        Implementations may acquire transactional resources here.
        """
        return self

    def __exit__(self, *args):
        """Exit the unit of work context.

        Default behavior is to roll back on exit.
        """
        self.rollback()

    def set_timeout(self, seconds: float | None) -> None:
        """Bound how long statements in this transaction may wait on locks.

        Backends without per-transaction timeouts ignore the call.
        """

    @abc.abstractmethod
    def commit(self):
        """Persist changes and finalize the transaction."""

    @abc.abstractmethod
    def rollback(self):
        """Revert changes and clean up transactional resources."""
