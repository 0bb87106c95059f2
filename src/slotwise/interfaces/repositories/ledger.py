"""Ledger persistence port.

Entries are append-only: only their payout lifecycle fields ever change, and
only through the payout methods below.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence

from slotwise.domain.ledger import LedgerEntry


class LedgerRepository(abc.ABC):
    """Contract for the append-only ledger."""

    @abc.abstractmethod
    def append(self, entry: LedgerEntry) -> None:
        """Insert a new entry."""

    @abc.abstractmethod
    def for_booking(self, booking_id: str) -> list[LedgerEntry]:
        """All entries attributed to a booking, oldest first."""

    @abc.abstractmethod
    def find_by_external_reference(self, reference: str) -> LedgerEntry | None:
        """The entry recorded for a gateway reference, if any."""

    @abc.abstractmethod
    def pending_for_owner(self, owner_id: str) -> list[LedgerEntry]:
        """Capture/refund entries of the owner still awaiting payout, locked for update."""

    @abc.abstractmethod
    def for_payout(self, payout_id: str) -> list[LedgerEntry]:
        """Entries selected for the given payout batch."""

    @abc.abstractmethod
    def assign_to_payout(self, entry_ids: Sequence[str], payout_id: str) -> None:
        """Mark entries IN_FLIGHT for ``payout_id``."""

    @abc.abstractmethod
    def settle_payout(self, payout_id: str, provider_reference: str) -> int:
        """Mark the batch's IN_FLIGHT or RECONCILE entries PAIDOUT; return count."""

    @abc.abstractmethod
    def release_payout(self, payout_id: str) -> int:
        """Return the batch's unsettled entries to PENDING and detach them; return count."""

    @abc.abstractmethod
    def flag_payout(self, payout_id: str) -> int:
        """Mark the batch's IN_FLIGHT entries RECONCILE; return count."""

    @abc.abstractmethod
    def flag_owner_pending(self, owner_id: str) -> int:
        """Mark all PENDING entries of the owner RECONCILE; return count."""

    @abc.abstractmethod
    def release_owner(self, owner_id: str) -> int:
        """Return the owner's RECONCILE entries to PENDING; return count.

        Entries still attached to a payout batch are left alone: whether that
        batch paid is unknown, so it must be settled or released by id.
        """
