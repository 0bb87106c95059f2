"""OwnerRepository backed by SQLAlchemy Core."""

from __future__ import annotations

from sqlalchemy import select, update

from slotwise.adapters.db.schema import owners, stores
from slotwise.domain.value_objects import Owner
from slotwise.interfaces.repositories import OwnerRepository

from .base import SqlAlchemyRepository


class SqlAlchemyOwnerRepository(SqlAlchemyRepository, OwnerRepository):
    """Owners table access."""

    def get(self, owner_id: str) -> Owner | None:
        stmt = select(owners).where(owners.c.id == owner_id)
        if not (row := self._execute(stmt).mappings().fetchone()):
            return None
        return Owner(**row)

    def list_all(self) -> list[Owner]:
        stmt = select(owners).order_by(owners.c.id)
        return [Owner(**row) for row in self._execute(stmt).mappings()]

    def owner_of_store(self, store_id: str) -> str | None:
        stmt = select(stores.c.owner_id).where(stores.c.id == store_id)
        return self._execute(stmt).scalar_one_or_none()

    def record_payout_failure(self, owner_id: str) -> int:
        self._execute(
            update(owners)
            .where(owners.c.id == owner_id)
            .values(consecutive_payout_failures=owners.c.consecutive_payout_failures + 1)
        )
        stmt = select(owners.c.consecutive_payout_failures).where(owners.c.id == owner_id)
        return int(self._execute(stmt).scalar_one())

    def reset_payout_failures(self, owner_id: str) -> None:
        self._execute(
            update(owners)
            .where(owners.c.id == owner_id)
            .values(consecutive_payout_failures=0)
        )

    def lock(self, owner_id: str) -> None:
        # SQLite already holds the write lock from BEGIN IMMEDIATE
        stmt = select(owners.c.id).where(owners.c.id == owner_id).with_for_update()
        self._execute(stmt)
