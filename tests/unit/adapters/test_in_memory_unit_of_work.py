"""Tests for the in-memory unit of work."""

import threading

from slotwise.adapters.unit_of_work import InMemoryUnitOfWork
from tests.fixtures.datagen import OWNER


def failures(data):
    return data.owners[OWNER].consecutive_payout_failures


def test_commit_keeps_changes(salon_data):
    uow = InMemoryUnitOfWork(salon_data)
    with uow:
        uow.owners.record_payout_failure(OWNER)
        uow.commit()

    assert uow.committed
    assert failures(salon_data) == 1


def test_exit_without_commit_rolls_back(salon_data):
    uow = InMemoryUnitOfWork(salon_data)
    with uow:
        uow.owners.record_payout_failure(OWNER)
        assert failures(salon_data) == 1

    assert not uow.committed
    assert failures(salon_data) == 0


def test_rollback_restores_last_commit(salon_data):
    uow = InMemoryUnitOfWork(salon_data)
    with uow:
        uow.owners.record_payout_failure(OWNER)
        uow.commit()
        uow.owners.record_payout_failure(OWNER)
        uow.rollback()
        assert failures(salon_data) == 1


def test_units_over_one_store_are_serialized(salon_data):
    first = InMemoryUnitOfWork(salon_data)
    entered = threading.Event()

    def second_unit():
        with InMemoryUnitOfWork(salon_data) as uow:
            entered.set()
            uow.commit()

    with first:
        worker = threading.Thread(target=second_unit)
        worker.start()
        assert not entered.wait(0.1)
    worker.join(timeout=5)

    assert entered.is_set()


def test_separate_stores_do_not_block(salon_data):
    other = InMemoryUnitOfWork()
    entered = threading.Event()

    def second_unit():
        with other:
            entered.set()

    with InMemoryUnitOfWork(salon_data):
        worker = threading.Thread(target=second_unit)
        worker.start()
        assert entered.wait(5)
    worker.join(timeout=5)
