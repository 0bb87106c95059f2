"""Owner persistence port."""

from __future__ import annotations

import abc

from slotwise.domain.value_objects import Owner


class OwnerRepository(abc.ABC):
    """Contract for owner lookups and payout failure bookkeeping."""

    @abc.abstractmethod
    def get(self, owner_id: str) -> Owner | None:
        """Return the owner, or None."""

    @abc.abstractmethod
    def list_all(self) -> list[Owner]:
        """Return all owners ordered by id."""

    @abc.abstractmethod
    def owner_of_store(self, store_id: str) -> str | None:
        """Return the id of the owner of ``store_id``."""

    @abc.abstractmethod
    def record_payout_failure(self, owner_id: str) -> int:
        """Increment the consecutive payout failure counter and return it."""

    @abc.abstractmethod
    def reset_payout_failures(self, owner_id: str) -> None:
        """Set the consecutive payout failure counter back to zero."""

    @abc.abstractmethod
    def lock(self, owner_id: str) -> None:
        """Hold the owner's row until the transaction ends.

        Refunds and the payout batcher both take this lock before reading an
        owner's pending entries, so a refund can never slip in beside a batch
        that is selecting the same money.
        """
