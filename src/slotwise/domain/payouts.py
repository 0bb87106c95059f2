"""Payout batch value object and payout errors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .errors import DomainError
from .value_objects import PayoutBatchStatus


@dataclass(frozen=True)
class PayoutBatch:
    """One payout attempt for one owner.

    The batch id doubles as the provider idempotency key, so retrying the
    same batch can never pay twice.
    """

    id: str
    owner_id: str
    amount_minor: int
    currency: str
    status: PayoutBatchStatus
    provider_reference: str | None = None
    attempted_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def idempotency_key(self) -> str:
        """Key handed to the payout provider."""
        return self.id


# ============================================================================
#                           Payout errors
# ============================================================================


class PayoutReconciliationRequired(DomainError):
    """Raised when money needs operator attention instead of an automatic retry."""

    def __init__(self, owner_id: str, reason: str) -> None:
        super().__init__(f"Owner {owner_id} needs manual payout reconciliation: {reason}")
        self.owner_id = owner_id
        self.reason = reason


class RefundAfterPayout(PayoutReconciliationRequired):
    """Raised when a refund would have to be netted against paid-out money."""

    def __init__(self, owner_id: str, booking_id: str, amount: int, refundable: int) -> None:
        super().__init__(
            owner_id,
            f"refund of {amount} on booking {booking_id} exceeds the {refundable} "
            "not yet selected for payout",
        )
        self.booking_id = booking_id
        self.amount = amount
        self.refundable = refundable


class BatchAlreadyRunning(DomainError):
    """Raised when a payout run starts while another one holds the job lock."""

    def __init__(self, job_name: str, holder: str | None) -> None:
        super().__init__(f"Job {job_name!r} is already running (held by {holder}).")
        self.job_name = job_name
        self.holder = holder


class PayoutNotFound(DomainError, LookupError):
    """Raised when a payout batch id is unknown."""

    def __init__(self, payout_id: str) -> None:
        super().__init__(f"Payout {payout_id} does not exist.")
        self.payout_id = payout_id


class PayoutNotReconcilable(DomainError):
    """Raised when settling a batch that is not waiting for reconciliation."""

    def __init__(self, payout_id: str, status: str) -> None:
        super().__init__(f"Payout {payout_id} is {status}, not RECONCILE.")
        self.payout_id = payout_id
        self.status = status
