"""Pytest fixtures for service layer handler unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from slotwise.adapters.payouts import InMemoryPayoutProvider

from .fakes import bootstrap_test_bus

if TYPE_CHECKING:
    from slotwise.service_layer.messagebus import MessageBus

# pylint: disable=redefined-outer-name


@pytest.fixture
def bus_params():
    """Default bus parameters. Classes can override this fixture"""
    return {}


@pytest.fixture
def provider() -> InMemoryPayoutProvider:
    """Payout provider shared with the bus built by `make_test_bus`."""
    return InMemoryPayoutProvider()


@pytest.fixture
def make_test_bus(bus_params, clock, provider) -> Callable[..., MessageBus]:
    """Factory to create a message bus over the seeded in-memory store."""

    def _make():
        params = {"clock": clock, "payout_provider": provider, **bus_params}
        return bootstrap_test_bus(**params)

    return _make


@pytest.fixture
def bus(make_test_bus) -> MessageBus:
    """A ready message bus."""
    return make_test_bus()
