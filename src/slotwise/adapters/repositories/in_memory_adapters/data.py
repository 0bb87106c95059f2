"""Shared state behind the in-memory repositories.

`InMemoryData` plays the role of the database: every in-memory repository of
a unit of work reads and writes the same instance. The seeding helpers stand
in for the rows an operator would load into the real tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time

from slotwise.domain.booking import Booking
from slotwise.domain.ledger import LedgerEntry
from slotwise.domain.payouts import PayoutBatch
from slotwise.domain.value_objects import Owner, ScheduleRow, StoreService
from slotwise.interfaces.repositories import JobLease

# pylint: disable=too-many-instance-attributes


@dataclass(eq=False)
class InMemoryData:
    """Tables of the in-memory store, keyed the way the SQL schema is."""

    owners: dict[str, Owner] = field(default_factory=dict)
    store_owners: dict[str, str] = field(default_factory=dict)
    services: dict[str, StoreService] = field(default_factory=dict)
    store_rows: dict[str, list[ScheduleRow]] = field(default_factory=dict)
    employee_rows: dict[tuple[str, str], list[ScheduleRow]] = field(default_factory=dict)
    assignments: dict[tuple[str, str], bool] = field(default_factory=dict)
    bookings: dict[str, Booking] = field(default_factory=dict)
    ledger: dict[str, LedgerEntry] = field(default_factory=dict)
    payouts: dict[str, PayoutBatch] = field(default_factory=dict)
    job_locks: dict[str, JobLease] = field(default_factory=dict)

    # --- seeding ---

    def add_owner(
        self, owner_id: str, name: str = "Owner", bank_account_ref: str | None = None
    ) -> Owner:
        """Register an owner; ``bank_account_ref`` None means no payouts."""
        owner = Owner(id=owner_id, name=name, bank_account_ref=bank_account_ref)
        self.owners[owner_id] = owner
        return owner

    def add_store(self, store_id: str, owner_id: str) -> None:
        """Register a store of ``owner_id``."""
        self.store_owners[store_id] = owner_id

    def add_service(self, service: StoreService) -> StoreService:
        """Register a service offered by its store."""
        self.services[service.id] = service
        return service

    def add_store_hours(
        self,
        store_id: str,
        day_of_week: int,
        start: time,
        end: time,
        *,
        is_active: bool = True,
    ) -> None:
        """Add one weekly opening interval (0 = Sunday)."""
        self.store_rows.setdefault(store_id, []).append(
            ScheduleRow(day_of_week, start, end, is_active)
        )

    def assign_employee(self, store_id: str, employee_id: str, *, is_active: bool = True) -> None:
        """Record (or end) an employee's assignment to a store."""
        self.assignments[(store_id, employee_id)] = is_active

    def add_employee_hours(  # pylint: disable=too-many-arguments
        self,
        store_id: str,
        employee_id: str,
        day_of_week: int,
        start: time,
        end: time,
        *,
        is_active: bool = True,
    ) -> None:
        """Add one weekly working interval of an employee at a store."""
        self.employee_rows.setdefault((store_id, employee_id), []).append(
            ScheduleRow(day_of_week, start, end, is_active)
        )
