"""In-memory repository implementations for testing purposes.

Note: These repositories are not thread-safe on their own. The in-memory
unit of work serializes whole transactions instead, which is also what makes
`lock_slot` and the booking row lock no-ops here.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from datetime import date, datetime

from slotwise.domain.booking import Booking
from slotwise.domain.ledger import LedgerEntry
from slotwise.domain.payouts import PayoutBatch
from slotwise.domain.value_objects import (
    LedgerDirection,
    Owner,
    PayoutBatchStatus,
    PayoutStatus,
    ScheduleRow,
    StoreService,
)
from slotwise.interfaces.errors import DuplicateRecordError
from slotwise.interfaces.repositories import (
    BookingRepository,
    JobLease,
    JobLockRepository,
    LedgerRepository,
    OwnerRepository,
    PayoutRepository,
    ScheduleRepository,
)

from .data import InMemoryData

_ATTACHED = (PayoutStatus.IN_FLIGHT, PayoutStatus.RECONCILE)


class InMemoryScheduleRepository(ScheduleRepository):
    """Schedules and services read from `InMemoryData`."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def get_store_service(self, store_service_id: str) -> StoreService | None:
        return self.data.services.get(store_service_id)

    def store_schedule(self, store_id: str) -> list[ScheduleRow]:
        return list(self.data.store_rows.get(store_id, []))

    def employee_schedule(self, store_id: str, employee_id: str) -> list[ScheduleRow]:
        if not self.data.assignments.get((store_id, employee_id), False):
            return []
        return list(self.data.employee_rows.get((store_id, employee_id), []))


class InMemoryBookingRepository(BookingRepository):
    """Bookings kept as copies so callers never mutate stored state in place."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def add(self, booking: Booking) -> None:
        if booking.id in self.data.bookings:
            raise DuplicateRecordError(f"booking {booking.id} already exists")
        self.data.bookings[booking.id] = dataclasses.replace(booking)

    def get(self, booking_id: str, *, for_update: bool = False) -> Booking | None:
        stored = self.data.bookings.get(booking_id)
        return dataclasses.replace(stored) if stored is not None else None

    def update(self, booking: Booking) -> None:
        if booking.id in self.data.bookings:
            self.data.bookings[booking.id] = dataclasses.replace(booking)

    def lock_slot(self, store_id: str, booking_date: date) -> None:
        pass  # the unit of work already holds the global lock

    def active_on(
        self, store_id: str, booking_date: date, employee_id: str | None = None
    ) -> list[Booking]:
        found = [
            dataclasses.replace(b)
            for b in self.data.bookings.values()
            if b.store_id == store_id
            and b.booking_date == booking_date
            and b.occupies_slot
            and (employee_id is None or b.employee_id in (employee_id, None))
        ]
        return sorted(found, key=lambda b: (b.start_time, b.id))


class InMemoryLedgerRepository(LedgerRepository):
    """Ledger entries in insertion order."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def append(self, entry: LedgerEntry) -> None:
        if entry.id in self.data.ledger:
            raise DuplicateRecordError(f"ledger entry {entry.id} already exists")
        if entry.external_reference is not None and self.find_by_external_reference(
            entry.external_reference
        ):
            raise DuplicateRecordError(
                f"external reference {entry.external_reference} already recorded"
            )
        self.data.ledger[entry.id] = entry

    def _select(self, predicate: Callable[[LedgerEntry], bool]) -> list[LedgerEntry]:
        return [e for e in self.data.ledger.values() if predicate(e)]

    def _rewrite(
        self, predicate: Callable[[LedgerEntry], bool], **changes
    ) -> int:
        targets = self._select(predicate)
        for entry in targets:
            self.data.ledger[entry.id] = dataclasses.replace(entry, **changes)
        return len(targets)

    def for_booking(self, booking_id: str) -> list[LedgerEntry]:
        return self._select(lambda e: e.booking_id == booking_id)

    def find_by_external_reference(self, reference: str) -> LedgerEntry | None:
        found = self._select(lambda e: e.external_reference == reference)
        return found[0] if found else None

    def pending_for_owner(self, owner_id: str) -> list[LedgerEntry]:
        return self._select(
            lambda e: e.owner_id == owner_id
            and e.payout_status is PayoutStatus.PENDING
            and e.direction is not LedgerDirection.PAYOUT
        )

    def for_payout(self, payout_id: str) -> list[LedgerEntry]:
        return self._select(
            lambda e: e.payout_id == payout_id and e.direction is not LedgerDirection.PAYOUT
        )

    def assign_to_payout(self, entry_ids: Sequence[str], payout_id: str) -> None:
        wanted = set(entry_ids)
        self._rewrite(
            lambda e: e.id in wanted and e.payout_status is PayoutStatus.PENDING,
            payout_status=PayoutStatus.IN_FLIGHT,
            payout_id=payout_id,
        )

    def settle_payout(self, payout_id: str, provider_reference: str) -> int:
        return self._rewrite(
            lambda e: e.payout_id == payout_id
            and e.direction is not LedgerDirection.PAYOUT
            and e.payout_status in _ATTACHED,
            payout_status=PayoutStatus.PAIDOUT,
            provider_reference=provider_reference,
        )

    def release_payout(self, payout_id: str) -> int:
        return self._rewrite(
            lambda e: e.payout_id == payout_id
            and e.direction is not LedgerDirection.PAYOUT
            and e.payout_status in _ATTACHED,
            payout_status=PayoutStatus.PENDING,
            payout_id=None,
        )

    def flag_payout(self, payout_id: str) -> int:
        return self._rewrite(
            lambda e: e.payout_id == payout_id
            and e.payout_status is PayoutStatus.IN_FLIGHT,
            payout_status=PayoutStatus.RECONCILE,
        )

    def flag_owner_pending(self, owner_id: str) -> int:
        return self._rewrite(
            lambda e: e.owner_id == owner_id
            and e.direction is not LedgerDirection.PAYOUT
            and e.payout_status is PayoutStatus.PENDING,
            payout_status=PayoutStatus.RECONCILE,
        )

    def release_owner(self, owner_id: str) -> int:
        return self._rewrite(
            lambda e: e.owner_id == owner_id
            and e.payout_status is PayoutStatus.RECONCILE
            and e.payout_id is None,
            payout_status=PayoutStatus.PENDING,
        )


class InMemoryOwnerRepository(OwnerRepository):
    """Owners read from `InMemoryData`."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def get(self, owner_id: str) -> Owner | None:
        return self.data.owners.get(owner_id)

    def list_all(self) -> list[Owner]:
        return [self.data.owners[k] for k in sorted(self.data.owners)]

    def owner_of_store(self, store_id: str) -> str | None:
        return self.data.store_owners.get(store_id)

    def record_payout_failure(self, owner_id: str) -> int:
        owner = self.data.owners[owner_id]
        owner = dataclasses.replace(
            owner, consecutive_payout_failures=owner.consecutive_payout_failures + 1
        )
        self.data.owners[owner_id] = owner
        return owner.consecutive_payout_failures

    def reset_payout_failures(self, owner_id: str) -> None:
        owner = self.data.owners[owner_id]
        self.data.owners[owner_id] = dataclasses.replace(
            owner, consecutive_payout_failures=0
        )

    def lock(self, owner_id: str) -> None:
        pass  # the unit of work already holds the global lock


class InMemoryPayoutRepository(PayoutRepository):
    """Payout batches in insertion order."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def add(self, batch: PayoutBatch) -> None:
        if batch.id in self.data.payouts:
            raise DuplicateRecordError(f"payout {batch.id} already exists")
        self.data.payouts[batch.id] = batch

    def get(self, payout_id: str) -> PayoutBatch | None:
        return self.data.payouts.get(payout_id)

    def set_status(
        self,
        payout_id: str,
        status: PayoutBatchStatus,
        *,
        provider_reference: str | None = None,
        completed_at: datetime | None = None,
    ) -> None:
        batch = self.data.payouts.get(payout_id)
        if batch is None:
            return
        self.data.payouts[payout_id] = dataclasses.replace(
            batch,
            status=status,
            provider_reference=provider_reference or batch.provider_reference,
            completed_at=completed_at or batch.completed_at,
        )

    def list_by_status(
        self, status: PayoutBatchStatus, owner_id: str | None = None
    ) -> list[PayoutBatch]:
        return [
            b
            for b in self.data.payouts.values()
            if b.status is status and (owner_id is None or b.owner_id == owner_id)
        ]


class InMemoryJobLockRepository(JobLockRepository):
    """Named leases in a dict."""

    def __init__(self, data: InMemoryData):
        self.data = data

    def acquire(
        self, name: str, holder: str, now: datetime, expires_at: datetime
    ) -> JobLease:
        current = self.data.job_locks.get(name)
        if current is None or current.expires_at < now or current.holder == holder:
            current = JobLease(name, holder, now, expires_at)
            self.data.job_locks[name] = current
        return current

    def release(self, name: str, holder: str) -> None:
        current = self.data.job_locks.get(name)
        if current is not None and current.holder == holder:
            del self.data.job_locks[name]
