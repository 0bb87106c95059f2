"""Repository ports for the relational store."""

from .bookings import BookingRepository
from .ledger import LedgerRepository
from .locks import JobLease, JobLockRepository
from .owners import OwnerRepository
from .payouts import PayoutRepository
from .schedules import ScheduleRepository

__all__ = [
    "BookingRepository",
    "JobLease",
    "JobLockRepository",
    "LedgerRepository",
    "OwnerRepository",
    "PayoutRepository",
    "ScheduleRepository",
]
