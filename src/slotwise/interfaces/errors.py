"""Infrastructure-level errors raised by adapters behind the ports."""


class StoreError(Exception):
    """Base class for relational store failures."""


class StoreUnavailableError(StoreError):
    """The database could not be reached or rejected the connection."""


class RequestTimeout(StoreError):
    """A request-scoped deadline expired or a lock wait timed out.

    Distinct from business-rule failures: the operation may succeed if retried.
    """

    def __init__(self, message: str = "request timed out") -> None:
        super().__init__(message)


class DuplicateRecordError(StoreError):
    """A write collided with a unique key written by another transaction."""
