"""Payout batch persistence port."""

from __future__ import annotations

import abc
from datetime import datetime

from slotwise.domain.payouts import PayoutBatch
from slotwise.domain.value_objects import PayoutBatchStatus


class PayoutRepository(abc.ABC):
    """Contract for recording payout attempts."""

    @abc.abstractmethod
    def add(self, batch: PayoutBatch) -> None:
        """Insert a new batch."""

    @abc.abstractmethod
    def get(self, payout_id: str) -> PayoutBatch | None:
        """Return the batch, or None."""

    @abc.abstractmethod
    def set_status(
        self,
        payout_id: str,
        status: PayoutBatchStatus,
        *,
        provider_reference: str | None = None,
        completed_at: datetime | None = None,
    ) -> None:
        """Update a batch's status (and provider reference when known)."""

    @abc.abstractmethod
    def list_by_status(
        self, status: PayoutBatchStatus, owner_id: str | None = None
    ) -> list[PayoutBatch]:
        """Return batches in ``status``, oldest first, optionally for one owner."""
