"""Outcome of one payout run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class OwnerOutcome(str, Enum):
    """What happened to one owner (or one recovered batch) in a run."""

    PAID = "PAID"
    NOTHING_DUE = "NOTHING_DUE"
    NO_BANK_ACCOUNT = "NO_BANK_ACCOUNT"
    HELD = "HELD"
    FAILED = "FAILED"
    RECONCILE = "RECONCILE"
    RELEASED = "RELEASED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class OwnerPayoutResult:
    """One line of the run report."""

    owner_id: str
    outcome: OwnerOutcome
    amount_minor: int = 0
    payout_id: str | None = None
    provider_reference: str | None = None
    detail: str | None = None


@dataclass
class PayoutRunReport:
    """Everything a payout run did, for logs and the CLI.

    ``recovered`` lists batches found IN_FLIGHT from an earlier, interrupted
    run; ``results`` has one line per owner considered in this run.
    """

    holder: str
    started_at: datetime
    finished_at: datetime | None = None
    recovered: list[OwnerPayoutResult] = field(default_factory=list)
    results: list[OwnerPayoutResult] = field(default_factory=list)

    def _with(self, *outcomes: OwnerOutcome) -> list[OwnerPayoutResult]:
        return [r for r in self.recovered + self.results if r.outcome in outcomes]

    @property
    def paid(self) -> list[OwnerPayoutResult]:
        """Payouts confirmed by the provider in this run."""
        return self._with(OwnerOutcome.PAID)

    @property
    def paid_total_minor(self) -> int:
        """Sum of `paid`."""
        return sum(r.amount_minor for r in self.paid)

    @property
    def needs_attention(self) -> list[OwnerPayoutResult]:
        """Results an operator should look at."""
        return self._with(OwnerOutcome.RECONCILE, OwnerOutcome.ERROR, OwnerOutcome.HELD)

    @property
    def failed(self) -> list[OwnerPayoutResult]:
        """Provider rejections that will be retried on the next run."""
        return self._with(OwnerOutcome.FAILED)
