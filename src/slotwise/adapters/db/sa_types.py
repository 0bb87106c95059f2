"""Column types shared by the slotwise schema and its migration.

Money is whole minor units; instants are UTC. Store-local wall times
(booking dates and slot times) use plain ``Date``/``Time`` columns instead.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import BigInteger
from sqlalchemy.types import DateTime, TypeDecorator

from slotwise.adapters.db.dialects import DialectName

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

__all__ = ["MINOR_UNITS", "UTCDateTime"]

#: Integer minor units (paise). Never a float or Numeric column.
MINOR_UNITS = BigInteger()


class UTCDateTime(TypeDecorator[datetime]):  # pylint: disable=too-many-ancestors
    """An instant such as ``created_at`` or a lease expiry, kept in UTC.

    Only aware datetimes are accepted; a naive one is almost always a
    store-local wall time in the wrong column, so binding it raises
    ``ValueError``. SQLite has no zone support and gets naive UTC; reads
    from either backend come back aware in UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError(f"refusing naive datetime {value.isoformat()} for a UTC column")
        utc = value.astimezone(timezone.utc)
        if dialect.name == DialectName.SQLITE.value:
            return utc.replace(tzinfo=None)
        return utc

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if not isinstance(value, datetime):
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_literal_param(self, value: datetime | None, dialect: Dialect) -> Any:
        return self.process_bind_param(value, dialect)

    @property
    def python_type(self) -> type[datetime]:
        return datetime
