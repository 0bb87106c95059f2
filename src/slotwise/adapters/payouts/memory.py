"""In-memory payout provider.

Behaves like a bank-transfer API that honours idempotency keys: repeating a
key returns the first receipt instead of paying again. Failures can be
scripted per call, which is how the batcher's retry and reconciliation paths
are exercised in tests.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass

from slotwise.interfaces.payout_provider import (
    PayoutProvider,
    PayoutProviderError,
    PayoutReceipt,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayoutCall:
    """One recorded `issue_payout` call."""

    destination_account_ref: str
    amount_minor: int
    currency: str
    idempotency_key: str


class InMemoryPayoutProvider(PayoutProvider):
    """Payout provider that keeps receipts in memory.

    Attributes:
        calls: Every `issue_payout` call in order, including failed ones.
        receipts: Receipts keyed by idempotency key; one per executed payout.
    """

    def __init__(self, reference_prefix: str = "pout_") -> None:
        self.calls: list[PayoutCall] = []
        self.receipts: dict[str, PayoutReceipt] = {}
        self._prefix = reference_prefix
        self._failures: deque[str] = deque()
        self._lookup_failures: deque[str] = deque()
        self._lost_responses: deque[str] = deque()
        self._failing_accounts: set[str] = set()
        self._lock = threading.Lock()

    # --- scripting ---

    def fail_next(self, times: int = 1, message: str = "provider unavailable") -> None:
        """Reject the next ``times`` payout calls."""
        self._failures.extend([message] * times)

    def fail_account(self, destination_account_ref: str) -> None:
        """Reject every payout to ``destination_account_ref``."""
        self._failing_accounts.add(destination_account_ref)

    def lose_next_response(self, times: int = 1) -> None:
        """Execute the next payouts but raise as if the response got lost."""
        self._lost_responses.extend(["response lost"] * times)

    def fail_next_lookup(self, times: int = 1, message: str = "lookup failed") -> None:
        """Make the next ``times`` `find_payout` calls inconclusive."""
        self._lookup_failures.extend([message] * times)

    @property
    def paid_total(self) -> int:
        """Sum of all executed payouts."""
        return sum(r.amount_minor for r in self.receipts.values())

    # --- PayoutProvider ---

    def issue_payout(
        self,
        destination_account_ref: str,
        amount_minor: int,
        currency: str,
        idempotency_key: str,
    ) -> PayoutReceipt:
        with self._lock:
            self.calls.append(
                PayoutCall(destination_account_ref, amount_minor, currency, idempotency_key)
            )
            if (receipt := self.receipts.get(idempotency_key)) is not None:
                logger.debug("Replayed idempotency key %s", idempotency_key)
                return receipt
            if self._failures:
                raise PayoutProviderError(self._failures.popleft())
            if destination_account_ref in self._failing_accounts:
                raise PayoutProviderError(f"account {destination_account_ref} rejected")
            receipt = PayoutReceipt(
                provider_reference=f"{self._prefix}{len(self.receipts) + 1:06d}",
                idempotency_key=idempotency_key,
                amount_minor=amount_minor,
                currency=currency,
            )
            self.receipts[idempotency_key] = receipt
            if self._lost_responses:
                raise PayoutProviderError(self._lost_responses.popleft())
            return receipt

    def find_payout(self, idempotency_key: str) -> PayoutReceipt | None:
        with self._lock:
            if self._lookup_failures:
                raise PayoutProviderError(self._lookup_failures.popleft())
            return self.receipts.get(idempotency_key)
