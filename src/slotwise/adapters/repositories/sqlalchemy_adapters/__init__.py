"""SQLAlchemy Core implementations of the repository ports.

All repositories share the Connection owned by the unit of work, so their
statements run inside one transaction.
"""

from .bookings import SqlAlchemyBookingRepository
from .ledger import SqlAlchemyLedgerRepository
from .locks import SqlAlchemyJobLockRepository
from .owners import SqlAlchemyOwnerRepository
from .payouts import SqlAlchemyPayoutRepository
from .schedules import SqlAlchemyScheduleRepository

__all__ = [
    "SqlAlchemyBookingRepository",
    "SqlAlchemyJobLockRepository",
    "SqlAlchemyLedgerRepository",
    "SqlAlchemyOwnerRepository",
    "SqlAlchemyPayoutRepository",
    "SqlAlchemyScheduleRepository",
]
