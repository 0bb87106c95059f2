"""Fixtures for id_generator contract tests."""

from collections.abc import Iterable

import pytest

from slotwise.adapters.id_generators import SequentialIdGenerator, ULIDGenerator
from slotwise.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "sequential"])
def id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """A fresh generator of each kind the bus can be wired with."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "sequential":
            yield SequentialIdGenerator(prefix="pout_")
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")


@pytest.fixture(params=["ulid", "sequential"])
def monotonic_id_generators(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Yield instances of IdGenerators that promise monotonic ID order."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "sequential":
            yield SequentialIdGenerator(width=6)
        case _:
            raise ValueError(f"unknown monotonic id generator type: {request.param}")
