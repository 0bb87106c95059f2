"""Availability resolution.

Turns weekly-recurring schedule rows into the concrete open windows of one
calendar date. Everything here is a pure function of its inputs: callers load
the rows, pass the date explicitly, and get back an ordered tuple of
non-overlapping `TimeWindow` values. An empty tuple means "closed".
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from .value_objects import ScheduleRow, TimeWindow, stored_day_of_week


def coalesce(windows: Iterable[TimeWindow]) -> tuple[TimeWindow, ...]:
    """Merge overlapping or touching windows into an ordered, disjoint tuple."""
    merged: list[TimeWindow] = []
    for window in sorted(windows):
        if merged and window.start <= merged[-1].end:
            last = merged.pop()
            merged.append(TimeWindow(last.start, max(last.end, window.end)))
        else:
            merged.append(window)
    return tuple(merged)


def intersect(
    left: Sequence[TimeWindow], right: Sequence[TimeWindow]
) -> tuple[TimeWindow, ...]:
    """Pairwise overlap of two disjoint, ordered window sequences."""
    result: list[TimeWindow] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if (overlap := left[i].intersection(right[j])) is not None:
            result.append(overlap)
        # advance whichever window finishes first
        if left[i].end <= right[j].end:
            i += 1
        else:
            j += 1
    return tuple(result)


def windows_for_day(rows: Iterable[ScheduleRow], day: date) -> tuple[TimeWindow, ...]:
    """Coalesced windows of the active rows matching ``day``'s weekday.

    Rows whose end is not after their start cannot describe an interval and
    are ignored.
    """
    weekday = stored_day_of_week(day)
    return coalesce(
        row.window
        for row in rows
        if row.is_active
        and row.day_of_week == weekday
        and row.spans_interval
    )


def resolve_windows(
    store_rows: Iterable[ScheduleRow],
    day: date,
    employee_rows: Iterable[ScheduleRow] | None = None,
) -> tuple[TimeWindow, ...]:
    """Open windows for a store, optionally narrowed to one employee.

    Args:
        store_rows: The store's weekly schedule rows.
        day: The concrete calendar date being resolved.
        employee_rows: The employee's rows *at this store*, or None when no
            employee was requested. An employee with no active assignment
            should be passed as an empty sequence, which yields no windows.

    Returns:
        Ordered, non-overlapping windows inside the union of active rows.
    """
    store_windows = windows_for_day(store_rows, day)
    if employee_rows is None:
        return store_windows
    return intersect(store_windows, windows_for_day(employee_rows, day))


def find_containing(
    windows: Iterable[TimeWindow], requested: TimeWindow
) -> TimeWindow | None:
    """The window that fully contains ``requested``, if any."""
    for window in windows:
        if window.contains(requested):
            return window
    return None


def candidate_slots(
    windows: Iterable[TimeWindow], duration_minutes: int, step_minutes: int = 30
) -> list[TimeWindow]:
    """Slots of ``duration_minutes`` stepped through each window.

    Starts are aligned to each window's opening and advance by
    ``step_minutes``; a slot is kept only if it ends inside the window.
    """
    if duration_minutes <= 0 or step_minutes <= 0:
        raise ValueError("duration and step must be positive")
    slots: list[TimeWindow] = []
    for window in windows:
        start = window.start
        while start + duration_minutes <= window.end:
            slots.append(TimeWindow(start, start + duration_minutes))
            start += step_minutes
    return slots
