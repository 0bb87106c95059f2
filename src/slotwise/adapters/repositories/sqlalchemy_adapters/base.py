"""Shared plumbing for the SQLAlchemy repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import DBAPIError, IntegrityError

from slotwise.adapters.db.dialects import DialectName, is_timeout
from slotwise.interfaces.errors import (
    DuplicateRecordError,
    RequestTimeout,
    StoreUnavailableError,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, CursorResult
    from sqlalchemy.sql import Executable

# pylint: disable=too-few-public-methods


class SqlAlchemyRepository:
    """Base for repositories sharing the unit of work's connection.

    Every statement goes through `_execute`, which maps driver errors onto
    the store errors in `slotwise.interfaces.errors`.
    """

    def __init__(self, connection: Connection):
        self.connection = connection
        self.dialect = DialectName.from_sqlalchemy(connection)

    def _execute(self, statement: Executable, *args: Any) -> CursorResult[Any]:
        try:
            return self.connection.execute(statement, *args)
        except IntegrityError as e:
            raise DuplicateRecordError(str(e.orig)) from e
        except DBAPIError as e:  # OperationalError, InterfaceError, etc.
            if is_timeout(e):
                raise RequestTimeout(f"lock wait timed out: {e.orig}") from e
            raise StoreUnavailableError(str(e)) from e
