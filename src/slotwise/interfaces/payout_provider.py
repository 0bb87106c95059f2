"""Payout provider port.

Abstracts the bank-transfer capability used by the payout batcher. Amounts
are integer minor units; every call carries an idempotency key so that the
provider itself refuses to pay the same batch twice.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass


@dataclass(frozen=True)
class PayoutReceipt:
    """Provider confirmation of a payout."""

    provider_reference: str
    idempotency_key: str
    amount_minor: int
    currency: str


class PayoutProviderError(Exception):
    """Transient provider failure; the owner is retried on the next scheduled run."""


class PayoutProvider(abc.ABC):
    """Contract for an external payout capability."""

    @abc.abstractmethod
    def issue_payout(
        self,
        destination_account_ref: str,
        amount_minor: int,
        currency: str,
        idempotency_key: str,
    ) -> PayoutReceipt:
        """Transfer ``amount_minor`` to the destination account.

        Calling again with an idempotency key the provider has already
        honoured must return the original receipt instead of paying twice.

        Raises:
            PayoutProviderError: If the provider rejects or fails the transfer.
        """

    @abc.abstractmethod
    def find_payout(self, idempotency_key: str) -> PayoutReceipt | None:
        """Look up a payout by idempotency key.

        Returns:
            The receipt if the provider executed a payout for the key, or None
            if it confirms that no payout exists.

        Raises:
            PayoutProviderError: If the provider cannot give a definite answer.
        """
