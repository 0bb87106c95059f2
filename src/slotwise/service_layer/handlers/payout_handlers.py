"""Payout batcher handlers.

A run pays every owner the signed sum of their PENDING ledger entries, at
most once per entry, even across crashes and concurrent schedulers:

1. A named lease in ``job_locks`` keeps runs single-flight.
2. Batches left IN_FLIGHT by an interrupted run are reconciled first, by
   asking the provider about their idempotency key.
3. For each owner, entries are moved to IN_FLIGHT under a new batch and
   committed *before* the provider is called, so a crash between the call
   and the bookkeeping is always visible to the next run's step 2.
4. The provider call carries the batch id as idempotency key and is made
   exactly once per batch by this run. An error response is followed by a
   lookup of the key; only a confirmed absence returns the entries to
   PENDING.
"""

from __future__ import annotations

import logging
import os
import socket
from collections.abc import Callable
from dataclasses import replace
from datetime import timedelta
from typing import Any

from slotwise.config import Settings
from slotwise.domain.errors import DomainError, OwnerNotFound
from slotwise.domain.ledger import LedgerEntry, pending_balance
from slotwise.domain.payouts import (
    BatchAlreadyRunning,
    PayoutBatch,
    PayoutNotFound,
    PayoutNotReconcilable,
    PayoutReconciliationRequired,
)
from slotwise.domain.value_objects import (
    LedgerDirection,
    Owner,
    PayoutBatchStatus,
    PayoutStatus,
)
from slotwise.interfaces.clock import Clock
from slotwise.interfaces.errors import StoreError
from slotwise.interfaces.id_generator import IdGenerator
from slotwise.interfaces.payout_provider import (
    PayoutProvider,
    PayoutProviderError,
    PayoutReceipt,
)
from slotwise.interfaces.repositories import JobLease
from slotwise.interfaces.unit_of_work import AbstractUnitOfWork
from slotwise.service_layer import commands
from slotwise.service_layer.payout_report import (
    OwnerOutcome,
    OwnerPayoutResult,
    PayoutRunReport,
)

logger = logging.getLogger(__name__)

PAYOUT_JOB = "payout-batch"  # pragma: no mutate


def default_holder() -> str:
    """Lease holder name identifying this process."""
    return f"{socket.gethostname()}:{os.getpid()}"


class _Run:  # pylint: disable=too-many-instance-attributes
    """State and steps of a single payout run."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        uow: AbstractUnitOfWork,
        clock: Clock,
        id_generator: IdGenerator,
        settings: Settings,
        payout_provider: PayoutProvider,
        holder: str,
    ) -> None:
        self.uow = uow
        self.clock = clock
        self.id_generator = id_generator
        self.settings = settings
        self.provider = payout_provider
        self.holder = holder
        self.report = PayoutRunReport(holder=holder, started_at=clock.now())

    # --- lease ---

    def acquire_lease(self) -> JobLease:
        """Take or renew the job lease and return the lease now in force."""
        now = self.clock.now()
        expires_at = now + timedelta(seconds=self.settings.payout_lease_seconds)
        with self.uow:
            lease = self.uow.job_locks.acquire(PAYOUT_JOB, self.holder, now, expires_at)
            self.uow.commit()
        if lease.holder != self.holder:
            logger.warning(
                "Payout lease held by %s until %s", lease.holder, lease.expires_at.isoformat()
            )
        return lease

    def release_lease(self) -> None:
        with self.uow:
            self.uow.job_locks.release(PAYOUT_JOB, self.holder)
            self.uow.commit()

    # --- bookkeeping ---

    def settle(self, batch: PayoutBatch, provider_reference: str) -> None:
        """Record a confirmed payout: entries PAIDOUT, batch SUCCEEDED, PAYOUT entry."""
        now = self.clock.now()
        with self.uow:
            settled = self.uow.ledger.settle_payout(batch.id, provider_reference)
            self.uow.payouts.set_status(
                batch.id,
                PayoutBatchStatus.SUCCEEDED,
                provider_reference=provider_reference,
                completed_at=now,
            )
            self.uow.ledger.append(
                LedgerEntry(
                    id=self.id_generator.new_id(),
                    owner_id=batch.owner_id,
                    direction=LedgerDirection.PAYOUT,
                    amount_minor=batch.amount_minor,
                    payout_status=PayoutStatus.PAIDOUT,
                    payout_id=batch.id,
                    provider_reference=provider_reference,
                    created_at=now,
                )
            )
            self.uow.owners.reset_payout_failures(batch.owner_id)
            self.uow.commit()
        logger.info(
            "Paid %s %s to owner %s (batch %s, ref %s, %d entries)",
            batch.amount_minor,
            batch.currency,
            batch.owner_id,
            batch.id,
            provider_reference,
            settled,
        )

    def release(self, batch: PayoutBatch) -> int:
        """Record that a batch did not pay: entries back to PENDING, batch FAILED."""
        with self.uow:
            released = self.uow.ledger.release_payout(batch.id)
            self.uow.payouts.set_status(
                batch.id, PayoutBatchStatus.FAILED, completed_at=self.clock.now()
            )
            self.uow.commit()
        return released

    def flag(self, batch: PayoutBatch) -> None:
        """Park a batch whose outcome is unknown for manual reconciliation."""
        with self.uow:
            self.uow.ledger.flag_payout(batch.id)
            self.uow.payouts.set_status(batch.id, PayoutBatchStatus.RECONCILE)
            self.uow.commit()

    # --- step 2: interrupted runs ---

    def recover_in_flight(self) -> None:
        with self.uow:
            stuck = self.uow.payouts.list_by_status(PayoutBatchStatus.IN_FLIGHT)
        for batch in stuck:
            self.report.recovered.append(self._recover(batch))

    def confirmed_receipt(self, batch: PayoutBatch, context: str) -> PayoutReceipt | None:
        """Ask the provider whether ``batch`` was paid.

        Returns:
            The receipt, or None when the provider confirms no payout exists.

        Raises:
            PayoutReconciliationRequired: The provider gave no definite answer
                or paid a different amount; the batch has been flagged.
        """
        try:
            receipt = self.provider.find_payout(batch.idempotency_key)
        except PayoutProviderError as e:
            reason = f"{context}; lookup failed: {e}"
        else:
            if receipt is None or receipt.amount_minor == batch.amount_minor:
                return receipt
            reason = (
                f"provider paid {receipt.amount_minor}, batch {batch.id} "
                f"recorded {batch.amount_minor}"
            )
        self.flag(batch)
        error = PayoutReconciliationRequired(batch.owner_id, reason)
        logger.error("%s", error)
        raise error

    def _recover(self, batch: PayoutBatch) -> OwnerPayoutResult:
        logger.warning("Batch %s of owner %s was left IN_FLIGHT", batch.id, batch.owner_id)
        result = OwnerPayoutResult(
            owner_id=batch.owner_id,
            outcome=OwnerOutcome.RECONCILE,
            amount_minor=batch.amount_minor,
            payout_id=batch.id,
        )
        try:
            receipt = self.confirmed_receipt(batch, f"batch {batch.id} left in flight")
        except PayoutReconciliationRequired as e:
            return replace(result, detail=str(e))

        if receipt is None:
            self.release(batch)
            logger.info("Batch %s never reached the provider; entries released", batch.id)
            return replace(result, outcome=OwnerOutcome.RELEASED)

        self.settle(batch, receipt.provider_reference)
        return replace(
            result, outcome=OwnerOutcome.PAID, provider_reference=receipt.provider_reference
        )

    # --- steps 3 and 4: one owner ---

    def pay_owner(self, owner: Owner) -> OwnerPayoutResult:
        if not owner.bank_account_ref:
            logger.debug("Owner %s has no bank account; skipped", owner.id)
            return OwnerPayoutResult(owner.id, OwnerOutcome.NO_BANK_ACCOUNT)
        if owner.consecutive_payout_failures >= self.settings.max_payout_attempts:
            logger.info("Owner %s is held for reconciliation; skipped", owner.id)
            return OwnerPayoutResult(
                owner.id,
                OwnerOutcome.HELD,
                detail=f"{owner.consecutive_payout_failures} consecutive failures",
            )

        batch = self._open_batch(owner)
        if batch is None:
            return OwnerPayoutResult(owner.id, OwnerOutcome.NOTHING_DUE)

        try:
            receipt = self.provider.issue_payout(
                owner.bank_account_ref,
                batch.amount_minor,
                batch.currency,
                batch.idempotency_key,
            )
        except PayoutProviderError as e:
            # an error response does not prove the transfer did not happen
            try:
                found = self.confirmed_receipt(batch, f"payout failed: {e}")
            except PayoutReconciliationRequired as error:
                return OwnerPayoutResult(
                    owner.id,
                    OwnerOutcome.RECONCILE,
                    amount_minor=batch.amount_minor,
                    payout_id=batch.id,
                    detail=str(error),
                )
            if found is None:
                return self._record_failure(owner, batch, str(e))
            logger.warning(
                "Payout %s reported %r but the provider executed it", batch.id, str(e)
            )
            receipt = found

        self.settle(batch, receipt.provider_reference)
        return OwnerPayoutResult(
            owner.id,
            OwnerOutcome.PAID,
            amount_minor=batch.amount_minor,
            payout_id=batch.id,
            provider_reference=receipt.provider_reference,
        )

    def _open_batch(self, owner: Owner) -> PayoutBatch | None:
        with self.uow:
            self.uow.owners.lock(owner.id)
            entries = self.uow.ledger.pending_for_owner(owner.id)
            amount = pending_balance(entries)
            if amount <= 0:
                if amount < 0:
                    logger.warning(
                        "Owner %s has a negative pending balance %s; nothing paid",
                        owner.id,
                        amount,
                    )
                return None
            batch = PayoutBatch(
                id=self.id_generator.new_id(),
                owner_id=owner.id,
                amount_minor=amount,
                currency=self.settings.payout_currency,
                status=PayoutBatchStatus.IN_FLIGHT,
                attempted_at=self.clock.now(),
            )
            self.uow.payouts.add(batch)
            self.uow.ledger.assign_to_payout([e.id for e in entries], batch.id)
            self.uow.commit()
        logger.debug(
            "Batch %s: %s over %d entries for owner %s",
            batch.id,
            amount,
            len(entries),
            owner.id,
        )
        return batch

    def _record_failure(
        self, owner: Owner, batch: PayoutBatch, reason: str
    ) -> OwnerPayoutResult:
        with self.uow:
            self.uow.ledger.release_payout(batch.id)
            self.uow.payouts.set_status(
                batch.id, PayoutBatchStatus.FAILED, completed_at=self.clock.now()
            )
            failures = self.uow.owners.record_payout_failure(owner.id)
            flagged = 0
            if failures >= self.settings.max_payout_attempts:
                flagged = self.uow.ledger.flag_owner_pending(owner.id)
            self.uow.commit()

        if flagged:
            error = PayoutReconciliationRequired(
                owner.id, f"{failures} consecutive payout failures, last: {reason}"
            )
            logger.error("%s (%d entries flagged)", error, flagged)
            outcome, detail = OwnerOutcome.RECONCILE, str(error)
        else:
            logger.warning(
                "Payout of %s to owner %s failed (%d/%d): %s",
                batch.amount_minor,
                owner.id,
                failures,
                self.settings.max_payout_attempts,
                reason,
            )
            outcome, detail = OwnerOutcome.FAILED, reason
        return OwnerPayoutResult(
            owner.id, outcome, amount_minor=batch.amount_minor, payout_id=batch.id, detail=detail
        )


def run_payout_batch(  # pylint: disable=too-many-arguments
    cmd: commands.RunPayoutBatch,
    uow: AbstractUnitOfWork,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
    payout_provider: PayoutProvider,
) -> PayoutRunReport:
    """Run one payout batch over all owners.

    Errors for one owner are logged and reported but never stop the run.

    Raises:
        BatchAlreadyRunning: Another process holds the payout lease.
    """
    holder = cmd.holder or default_holder()
    run = _Run(
        uow=uow,
        clock=clock,
        id_generator=id_generator,
        settings=settings,
        payout_provider=payout_provider,
        holder=holder,
    )
    if (lease := run.acquire_lease()).holder != holder:
        raise BatchAlreadyRunning(PAYOUT_JOB, lease.holder)

    logger.info("Payout run started by %s", holder)
    try:
        run.recover_in_flight()
        with uow:
            owners = uow.owners.list_all()
        for owner in owners:
            if run.acquire_lease().holder != holder:
                logger.error("Payout lease lost; stopping before owner %s", owner.id)
                break
            try:
                result = run.pay_owner(owner)
            except (DomainError, StoreError) as e:
                logger.exception("Payout for owner %s failed", owner.id)
                result = OwnerPayoutResult(owner.id, OwnerOutcome.ERROR, detail=str(e))
            run.report.results.append(result)
    finally:
        run.release_lease()
        run.report.finished_at = clock.now()

    report = run.report
    logger.info(
        "Payout run finished: %d paid (%s), %d failed, %d need attention",
        len(report.paid),
        report.paid_total_minor,
        len(report.failed),
        len(report.needs_attention),
    )
    return report


def release_reconciliation(
    cmd: commands.ReleaseReconciliation, uow: AbstractUnitOfWork
) -> int:
    """Make an owner's flagged entries payable again and clear their failures.

    Entries still attached to an unresolved batch stay flagged; those are
    resolved with `settle_reconciled_payout`.

    Returns:
        Number of entries released.
    """
    with uow:
        if uow.owners.get(cmd.owner_id) is None:
            raise OwnerNotFound(cmd.owner_id)
        released = uow.ledger.release_owner(cmd.owner_id)
        uow.owners.reset_payout_failures(cmd.owner_id)
        uow.commit()
    logger.info("Released %d entries of owner %s for payout", released, cmd.owner_id)
    return released


def settle_reconciled_payout(
    cmd: commands.SettleReconciledPayout,
    uow: AbstractUnitOfWork,
    clock: Clock,
    id_generator: IdGenerator,
    settings: Settings,
    payout_provider: PayoutProvider,
) -> PayoutBatch:
    """Close a RECONCILE batch once an operator knows whether it paid."""
    with uow:
        batch = uow.payouts.get(cmd.payout_id)
    if batch is None:
        raise PayoutNotFound(cmd.payout_id)
    if batch.status is not PayoutBatchStatus.RECONCILE:
        raise PayoutNotReconcilable(batch.id, batch.status.value)

    run = _Run(
        uow=uow,
        clock=clock,
        id_generator=id_generator,
        settings=settings,
        payout_provider=payout_provider,
        holder=default_holder(),
    )
    if cmd.provider_reference:
        run.settle(batch, cmd.provider_reference)
    else:
        released = run.release(batch)
        logger.info("Batch %s closed as unpaid; %d entries released", batch.id, released)

    with uow:
        settled = uow.payouts.get(batch.id)
    assert settled is not None
    return settled


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.RunPayoutBatch: run_payout_batch,
    commands.ReleaseReconciliation: release_reconciliation,
    commands.SettleReconciledPayout: settle_reconciled_payout,
}
