"""Tests for SequentialIdGenerator."""

import pytest

from slotwise.adapters.id_generators import SequentialIdGenerator


@pytest.mark.parametrize("width", [5, 10, 15])
def test_sequential_id_generator_shape(width):
    """Test that SequentialIdGenerator pads ids to the requested width."""
    gen = SequentialIdGenerator(width=width)
    new_id = gen.new_id()
    assert isinstance(new_id, str)
    assert len(new_id) == width
    assert new_id.isdigit()
    assert int(new_id) == 1  # First ID should be "000...001"


def test_sequential_id_generator_prefix():
    """Test that SequentialIdGenerator produces prefixed sequential IDs."""
    gen = SequentialIdGenerator(prefix="bk-", width=4)
    ids = [gen.new_id() for _ in range(3)]
    assert ids == ["bk-0001", "bk-0002", "bk-0003"]
