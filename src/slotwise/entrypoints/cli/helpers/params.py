"""Click parameter types for calendar dates, wall-clock times and amounts."""

from __future__ import annotations

from datetime import date, time

import click

from slotwise.domain.money import to_minor_units


class DateParam(click.ParamType):
    """ISO calendar date (``YYYY-MM-DD``)."""

    name = "date"

    def convert(self, value, param, ctx):
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(value)
        except ValueError:
            self.fail(f"{value!r} is not a date in YYYY-MM-DD form", param, ctx)


class TimeParam(click.ParamType):
    """Wall-clock time (``HH:MM``), minute precision."""

    name = "time"

    def convert(self, value, param, ctx):
        if isinstance(value, time):
            return value
        try:
            parsed = time.fromisoformat(value)
        except ValueError:
            self.fail(f"{value!r} is not a time in HH:MM form", param, ctx)
        if parsed.second or parsed.microsecond:
            self.fail(f"{value!r} must be a whole minute", param, ctx)
        return parsed


class AmountParam(click.ParamType):
    """Positive major-unit amount such as ``499.50``, converted to minor units."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        try:
            minor = to_minor_units(value.strip())
        except ValueError as e:
            self.fail(f"{value!r} is not a valid amount: {e}", param, ctx)
        if minor <= 0:
            self.fail(f"{value!r} must be greater than zero", param, ctx)
        return minor


DATE = DateParam()
TIME = TimeParam()
AMOUNT = AmountParam()
