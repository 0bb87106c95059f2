"""JobLockRepository backed by SQLAlchemy Core."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select, update

from slotwise.adapters.db.dialects import insert_ignoring_conflicts
from slotwise.adapters.db.schema import job_locks
from slotwise.interfaces.repositories import JobLease, JobLockRepository

from .base import SqlAlchemyRepository


class SqlAlchemyJobLockRepository(SqlAlchemyRepository, JobLockRepository):
    """Expiring leases stored one row per job name."""

    def acquire(
        self, name: str, holder: str, now: datetime, expires_at: datetime
    ) -> JobLease:
        # 1) no-throw insert: wins when nobody ever held the lock
        inserted = self._execute(
            insert_ignoring_conflicts(
                self.dialect,
                job_locks,
                {
                    "name": name,
                    "holder": holder,
                    "acquired_at": now,
                    "expires_at": expires_at,
                },
            )
        )

        # 2) otherwise take over an expired lease (or renew our own)
        if inserted.rowcount != 1:
            self._execute(
                update(job_locks)
                .where(
                    job_locks.c.name == name,
                    or_(job_locks.c.expires_at < now, job_locks.c.holder == holder),
                )
                .values(holder=holder, acquired_at=now, expires_at=expires_at)
            )

        # 3) whoever is in the row now holds the lock
        row = self._execute(select(job_locks).where(job_locks.c.name == name)).one()
        return JobLease(
            name=row.name,
            holder=row.holder,
            acquired_at=row.acquired_at,
            expires_at=row.expires_at,
        )

    def release(self, name: str, holder: str) -> None:
        self._execute(
            delete(job_locks).where(job_locks.c.name == name, job_locks.c.holder == holder)
        )
