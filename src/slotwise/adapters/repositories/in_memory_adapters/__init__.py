"""In-memory implementations of the repository ports, for tests and demos."""

from .data import InMemoryData
from .repositories import (
    InMemoryBookingRepository,
    InMemoryJobLockRepository,
    InMemoryLedgerRepository,
    InMemoryOwnerRepository,
    InMemoryPayoutRepository,
    InMemoryScheduleRepository,
)

__all__ = [
    "InMemoryBookingRepository",
    "InMemoryData",
    "InMemoryJobLockRepository",
    "InMemoryLedgerRepository",
    "InMemoryOwnerRepository",
    "InMemoryPayoutRepository",
    "InMemoryScheduleRepository",
]
