"""Unit tests for fixed-point money helpers."""

from decimal import Decimal

import pytest

from slotwise.domain.money import format_minor, to_minor_units

# pylint: disable=magic-value-comparison


@pytest.mark.parametrize(
    "value, expected",
    [("499.50", 49950), (Decimal("10"), 1000), (7, 700), ("0.01", 1), ("-2.5", -250)],
)
def test_to_minor_units(value, expected):
    """Decimal strings, Decimals and whole ints convert exactly."""
    assert to_minor_units(value) == expected


def test_to_minor_units_rejects_floats():
    """Floats never enter money arithmetic."""
    with pytest.raises(TypeError):
        to_minor_units(4.5)  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["1.005", "abc", "NaN", "Infinity"])
def test_to_minor_units_rejects_bad_amounts(value):
    """Sub-paisa precision and non-numbers are refused."""
    with pytest.raises(ValueError):
        to_minor_units(value)


def test_format_minor():
    """Minor units render with exactly two decimals."""
    assert format_minor(49950) == "499.50"
    assert format_minor(5) == "0.05"
    assert format_minor(0) == "0.00"

