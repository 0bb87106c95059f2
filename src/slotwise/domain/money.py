"""Fixed-point money helpers.

All amounts inside the core are integers of minor units (paise for INR).
Conversion from human-entered decimal strings happens only at the edges,
through `Decimal`; floats are rejected outright.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

MINOR_UNIT_EXPONENT = 2  # pragma: no mutate

__all__ = ["to_minor_units", "format_minor"]


def to_minor_units(value: Decimal | str | int, exponent: int = MINOR_UNIT_EXPONENT) -> int:
    """Convert a major-unit decimal amount into integer minor units.

    Args:
        value: Amount in major units, e.g. ``Decimal("499.50")`` or ``"499.50"``.
            Integers are taken as whole major units.
        exponent: Number of decimal places of the currency.

    Returns:
        The amount in minor units, e.g. ``49950``.

    Raises:
        TypeError: If ``value`` is a float.
        ValueError: If ``value`` is not a decimal number or has more precision
            than the currency supports.
    """
    if isinstance(value, float):
        raise TypeError("floats are not accepted for money; pass a Decimal or str")
    try:
        amount = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"not a decimal amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"not a finite amount: {value!r}")
    scaled = amount.scaleb(exponent)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value!r} has more than {exponent} decimal places")
    return int(scaled)


def format_minor(amount: int, exponent: int = MINOR_UNIT_EXPONENT) -> str:
    """Render minor units as a major-unit string, e.g. ``49950`` → ``"499.50"``."""
    return str(Decimal(amount).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent)))

