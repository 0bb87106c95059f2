"""LedgerRepository backed by SQLAlchemy Core.

Rows are only ever inserted; updates touch the payout lifecycle columns
(``payout_status``, ``payout_id``, ``provider_reference``) and nothing else.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import insert, select, update

from slotwise.adapters.db.schema import ledger_entries
from slotwise.domain.ledger import LedgerEntry
from slotwise.domain.value_objects import LedgerDirection, PayoutStatus
from slotwise.interfaces.repositories import LedgerRepository

from .base import SqlAlchemyRepository

_PAYABLE = (LedgerDirection.CAPTURE.value, LedgerDirection.REFUND.value)
_ATTACHED = (PayoutStatus.IN_FLIGHT.value, PayoutStatus.RECONCILE.value)


def _to_entry(row: Mapping[str, Any]) -> LedgerEntry:
    return LedgerEntry(
        id=row["id"],
        owner_id=row["owner_id"],
        direction=LedgerDirection(row["direction"]),
        amount_minor=int(row["amount_minor"]),
        booking_id=row["booking_id"],
        payout_status=PayoutStatus(row["payout_status"]),
        payout_id=row["payout_id"],
        provider_reference=row["provider_reference"],
        external_reference=row["external_reference"],
        created_at=row["created_at"],
    )


class SqlAlchemyLedgerRepository(SqlAlchemyRepository, LedgerRepository):
    """Append-only ledger table access."""

    _ordered = (ledger_entries.c.created_at, ledger_entries.c.id)

    def append(self, entry: LedgerEntry) -> None:
        self._execute(
            insert(ledger_entries).values(
                id=entry.id,
                booking_id=entry.booking_id,
                owner_id=entry.owner_id,
                direction=entry.direction.value,
                amount_minor=entry.amount_minor,
                payout_status=entry.payout_status.value,
                payout_id=entry.payout_id,
                provider_reference=entry.provider_reference,
                external_reference=entry.external_reference,
                created_at=entry.created_at,
            )
        )

    # --- lookups ---

    def _select(self, *criteria, for_update: bool = False) -> list[LedgerEntry]:
        stmt = select(ledger_entries).where(*criteria).order_by(*self._ordered)
        if for_update:
            stmt = stmt.with_for_update()
        return [_to_entry(row) for row in self._execute(stmt).mappings()]

    def for_booking(self, booking_id: str) -> list[LedgerEntry]:
        return self._select(ledger_entries.c.booking_id == booking_id)

    def find_by_external_reference(self, reference: str) -> LedgerEntry | None:
        found = self._select(ledger_entries.c.external_reference == reference)
        return found[0] if found else None

    def pending_for_owner(self, owner_id: str) -> list[LedgerEntry]:
        return self._select(
            ledger_entries.c.owner_id == owner_id,
            ledger_entries.c.payout_status == PayoutStatus.PENDING.value,
            ledger_entries.c.direction.in_(_PAYABLE),
            for_update=True,
        )

    def for_payout(self, payout_id: str) -> list[LedgerEntry]:
        return self._select(
            ledger_entries.c.payout_id == payout_id,
            ledger_entries.c.direction.in_(_PAYABLE),
        )

    # --- payout lifecycle ---

    def _update(self, *criteria, **values) -> int:
        result = self._execute(update(ledger_entries).where(*criteria).values(**values))
        return int(result.rowcount)

    def assign_to_payout(self, entry_ids: Sequence[str], payout_id: str) -> None:
        if not entry_ids:
            return
        self._update(
            ledger_entries.c.id.in_(list(entry_ids)),
            ledger_entries.c.payout_status == PayoutStatus.PENDING.value,
            payout_status=PayoutStatus.IN_FLIGHT.value,
            payout_id=payout_id,
        )

    def settle_payout(self, payout_id: str, provider_reference: str) -> int:
        return self._update(
            ledger_entries.c.payout_id == payout_id,
            ledger_entries.c.direction.in_(_PAYABLE),
            ledger_entries.c.payout_status.in_(_ATTACHED),
            payout_status=PayoutStatus.PAIDOUT.value,
            provider_reference=provider_reference,
        )

    def release_payout(self, payout_id: str) -> int:
        return self._update(
            ledger_entries.c.payout_id == payout_id,
            ledger_entries.c.direction.in_(_PAYABLE),
            ledger_entries.c.payout_status.in_(_ATTACHED),
            payout_status=PayoutStatus.PENDING.value,
            payout_id=None,
        )

    def flag_payout(self, payout_id: str) -> int:
        return self._update(
            ledger_entries.c.payout_id == payout_id,
            ledger_entries.c.payout_status == PayoutStatus.IN_FLIGHT.value,
            payout_status=PayoutStatus.RECONCILE.value,
        )

    def flag_owner_pending(self, owner_id: str) -> int:
        return self._update(
            ledger_entries.c.owner_id == owner_id,
            ledger_entries.c.direction.in_(_PAYABLE),
            ledger_entries.c.payout_status == PayoutStatus.PENDING.value,
            payout_status=PayoutStatus.RECONCILE.value,
        )

    def release_owner(self, owner_id: str) -> int:
        return self._update(
            ledger_entries.c.owner_id == owner_id,
            ledger_entries.c.payout_status == PayoutStatus.RECONCILE.value,
            ledger_entries.c.payout_id.is_(None),
            payout_status=PayoutStatus.PENDING.value,
        )
