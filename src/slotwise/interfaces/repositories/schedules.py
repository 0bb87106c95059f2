"""Read-only access to store services and weekly schedules."""

from __future__ import annotations

import abc

from slotwise.domain.value_objects import ScheduleRow, StoreService


class ScheduleRepository(abc.ABC):
    """Lookups the availability resolver and slot allocator depend on."""

    @abc.abstractmethod
    def get_store_service(self, store_service_id: str) -> StoreService | None:
        """Return the store service, or None if it does not exist."""

    @abc.abstractmethod
    def store_schedule(self, store_id: str) -> list[ScheduleRow]:
        """Return every weekly schedule row of the store (active or not)."""

    @abc.abstractmethod
    def employee_schedule(self, store_id: str, employee_id: str) -> list[ScheduleRow]:
        """Return the employee's weekly rows at the store.

        Returns an empty list when the employee holds no active assignment at
        the store, so the employee resolves to no open windows there.
        """
