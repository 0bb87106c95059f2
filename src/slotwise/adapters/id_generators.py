"""ID generators for bookings, ledger entries and payout batches."""

import threading

from ulid import monotonic

from slotwise.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator (the default).

    ULIDs sort by creation time, so ledger entries and payout batches created
    by one process keep their order when sorted by id. Payout batch ids double
    as provider idempotency keys, which only needs uniqueness.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            return str(monotonic.new())


class SequentialIdGenerator(IdGenerator):
    """Zero-padded counter ids with an optional prefix, e.g. ``bk-000001``.

    Note:
        Not suitable for production use; primarily for tests and demos.
    """

    def __init__(self, prefix: str = "", width: int = 6) -> None:
        self._counter = 0
        self._prefix = prefix
        self._width = width
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self._prefix}{self._counter:0{self._width}d}"
