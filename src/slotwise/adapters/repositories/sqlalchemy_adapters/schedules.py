"""ScheduleRepository backed by SQLAlchemy Core."""

from __future__ import annotations

from sqlalchemy import and_, select

from slotwise.adapters.db.schema import (
    employee_availability,
    store_availability,
    store_employees,
    store_services,
)
from slotwise.domain.value_objects import ScheduleRow, StoreService
from slotwise.interfaces.repositories import ScheduleRepository

from .base import SqlAlchemyRepository


class SqlAlchemyScheduleRepository(SqlAlchemyRepository, ScheduleRepository):
    """Read-only lookups over services and weekly schedules."""

    def get_store_service(self, store_service_id: str) -> StoreService | None:
        stmt = select(store_services).where(store_services.c.id == store_service_id)
        if not (row := self._execute(stmt).mappings().fetchone()):
            return None
        return StoreService(
            id=row["id"],
            store_id=row["store_id"],
            name=row["name"],
            price_minor=int(row["price_minor"]),
            duration_minutes=int(row["duration_minutes"]),
            is_active=bool(row["is_active"]),
        )

    def store_schedule(self, store_id: str) -> list[ScheduleRow]:
        t = store_availability
        stmt = (
            select(t.c.day_of_week, t.c.start_time, t.c.end_time, t.c.is_active)
            .where(t.c.store_id == store_id)
            .order_by(t.c.day_of_week, t.c.start_time)
        )
        return [ScheduleRow(**row) for row in self._execute(stmt).mappings()]

    def employee_schedule(self, store_id: str, employee_id: str) -> list[ScheduleRow]:
        t = employee_availability
        assignment = store_employees
        stmt = (
            select(t.c.day_of_week, t.c.start_time, t.c.end_time, t.c.is_active)
            .join(
                assignment,
                and_(
                    assignment.c.store_id == t.c.store_id,
                    assignment.c.employee_id == t.c.employee_id,
                ),
            )
            .where(
                t.c.store_id == store_id,
                t.c.employee_id == employee_id,
                assignment.c.is_active.is_(True),
            )
            .order_by(t.c.day_of_week, t.c.start_time)
        )
        return [ScheduleRow(**row) for row in self._execute(stmt).mappings()]
