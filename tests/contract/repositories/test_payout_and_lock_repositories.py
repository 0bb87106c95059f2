"""Contract tests for payout batches and job locks."""

from datetime import timedelta

import pytest

from slotwise.domain.payouts import PayoutBatch
from slotwise.domain.value_objects import PayoutBatchStatus
from slotwise.interfaces.errors import DuplicateRecordError
from tests.fixtures.datagen import NOW, OTHER_OWNER, OWNER

JOB = "payouts"
HOUR = timedelta(hours=1)


def batch(payout_id, owner_id=OWNER, minutes=0):
    return PayoutBatch(
        id=payout_id,
        owner_id=owner_id,
        amount_minor=1000,
        currency="INR",
        status=PayoutBatchStatus.IN_FLIGHT,
        attempted_at=NOW + timedelta(minutes=minutes),
    )


def test_add_get_and_set_status(make_uow):
    with make_uow() as uow:
        uow.payouts.add(batch("po_1"))
        uow.commit()

    with make_uow() as uow:
        assert uow.payouts.get("po_1") == batch("po_1")
        assert uow.payouts.get("po_missing") is None
        uow.payouts.set_status(
            "po_1",
            PayoutBatchStatus.SUCCEEDED,
            provider_reference="pout_1",
            completed_at=NOW + HOUR,
        )
        uow.commit()

    with make_uow() as uow:
        stored = uow.payouts.get("po_1")
        assert stored.status is PayoutBatchStatus.SUCCEEDED
        assert stored.provider_reference == "pout_1"
        assert stored.completed_at == NOW + HOUR

        uow.payouts.set_status("po_1", PayoutBatchStatus.RECONCILE)
        assert uow.payouts.get("po_1").provider_reference == "pout_1"


def test_duplicate_batch_is_rejected(make_uow):
    with make_uow() as uow:
        uow.payouts.add(batch("po_1"))
        with pytest.raises(DuplicateRecordError):
            uow.payouts.add(batch("po_1"))


def test_list_by_status(make_uow):
    with make_uow() as uow:
        uow.payouts.add(batch("po_2", minutes=5))
        uow.payouts.add(batch("po_1"))
        uow.payouts.add(batch("po_3", owner_id=OTHER_OWNER, minutes=10))
        uow.payouts.set_status("po_2", PayoutBatchStatus.FAILED)
        uow.commit()

    with make_uow() as uow:
        in_flight = uow.payouts.list_by_status(PayoutBatchStatus.IN_FLIGHT)
        mine = uow.payouts.list_by_status(PayoutBatchStatus.IN_FLIGHT, OWNER)
        failed = uow.payouts.list_by_status(PayoutBatchStatus.FAILED)

    assert [b.id for b in in_flight] == ["po_1", "po_3"]
    assert [b.id for b in mine] == ["po_1"]
    assert [b.id for b in failed] == ["po_2"]


def test_job_lock_single_holder(make_uow):
    with make_uow() as uow:
        lease = uow.job_locks.acquire(JOB, "a", NOW, NOW + HOUR)
        uow.commit()
    assert lease.holder == "a"

    with make_uow() as uow:
        other = uow.job_locks.acquire(JOB, "b", NOW + timedelta(minutes=1), NOW + 2 * HOUR)
        uow.commit()
    assert other.holder == "a"
    assert other.expires_at == NOW + HOUR


def test_job_lock_renewal_and_release(make_uow):
    with make_uow() as uow:
        uow.job_locks.acquire(JOB, "a", NOW, NOW + HOUR)
        renewed = uow.job_locks.acquire(JOB, "a", NOW + HOUR / 2, NOW + 2 * HOUR)
        assert renewed.expires_at == NOW + 2 * HOUR

        uow.job_locks.release(JOB, "b")
        assert uow.job_locks.acquire(JOB, "b", NOW, NOW + HOUR).holder == "a"

        uow.job_locks.release(JOB, "a")
        assert uow.job_locks.acquire(JOB, "b", NOW, NOW + HOUR).holder == "b"
        uow.commit()


def test_expired_lease_is_taken_over(make_uow):
    with make_uow() as uow:
        uow.job_locks.acquire(JOB, "a", NOW, NOW + HOUR)
        uow.commit()

    with make_uow() as uow:
        lease = uow.job_locks.acquire(JOB, "b", NOW + 2 * HOUR, NOW + 3 * HOUR)
        uow.commit()
    assert lease.holder == "b"
    assert lease.acquired_at == NOW + 2 * HOUR
