"""PayoutRepository backed by SQLAlchemy Core."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import insert, select, update

from slotwise.adapters.db.schema import payouts
from slotwise.domain.payouts import PayoutBatch
from slotwise.domain.value_objects import PayoutBatchStatus
from slotwise.interfaces.repositories import PayoutRepository

from .base import SqlAlchemyRepository


def _to_batch(row: Mapping[str, Any]) -> PayoutBatch:
    return PayoutBatch(
        id=row["id"],
        owner_id=row["owner_id"],
        amount_minor=int(row["amount_minor"]),
        currency=row["currency"],
        status=PayoutBatchStatus(row["status"]),
        provider_reference=row["provider_reference"],
        attempted_at=row["attempted_at"],
        completed_at=row["completed_at"],
    )


class SqlAlchemyPayoutRepository(SqlAlchemyRepository, PayoutRepository):
    """Payout batch table access."""

    def add(self, batch: PayoutBatch) -> None:
        self._execute(
            insert(payouts).values(
                id=batch.id,
                owner_id=batch.owner_id,
                amount_minor=batch.amount_minor,
                currency=batch.currency,
                status=batch.status.value,
                provider_reference=batch.provider_reference,
                attempted_at=batch.attempted_at,
                completed_at=batch.completed_at,
            )
        )

    def get(self, payout_id: str) -> PayoutBatch | None:
        stmt = select(payouts).where(payouts.c.id == payout_id)
        if not (row := self._execute(stmt).mappings().fetchone()):
            return None
        return _to_batch(row)

    def set_status(
        self,
        payout_id: str,
        status: PayoutBatchStatus,
        *,
        provider_reference: str | None = None,
        completed_at: datetime | None = None,
    ) -> None:
        values: dict[str, Any] = {"status": status.value}
        if provider_reference is not None:
            values["provider_reference"] = provider_reference
        if completed_at is not None:
            values["completed_at"] = completed_at
        self._execute(update(payouts).where(payouts.c.id == payout_id).values(**values))

    def list_by_status(
        self, status: PayoutBatchStatus, owner_id: str | None = None
    ) -> list[PayoutBatch]:
        stmt = (
            select(payouts)
            .where(payouts.c.status == status.value)
            .order_by(payouts.c.attempted_at, payouts.c.id)
        )
        if owner_id is not None:
            stmt = stmt.where(payouts.c.owner_id == owner_id)
        return [_to_batch(row) for row in self._execute(stmt).mappings()]
