"""Module including value objects used across the domain layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

MINUTES_PER_DAY = 24 * 60


class BookingStatus(str, Enum):
    """Enumeration of booking lifecycle states"""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """True for states no transition may leave."""
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class PaymentStatus(str, Enum):
    """Enumeration of payment states derived from the ledger"""

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    FULL = "FULL"
    REFUNDED = "REFUNDED"


class LedgerDirection(str, Enum):
    """Direction of a monetary movement recorded in the ledger"""

    CAPTURE = "CAPTURE"
    REFUND = "REFUND"
    PAYOUT = "PAYOUT"


class PayoutStatus(str, Enum):
    """Payout lifecycle of a single ledger entry"""

    PENDING = "PENDING"
    IN_FLIGHT = "IN_FLIGHT"
    PAIDOUT = "PAIDOUT"
    RECONCILE = "RECONCILE"


class PayoutBatchStatus(str, Enum):
    """Lifecycle of one payout attempt for one owner"""

    IN_FLIGHT = "IN_FLIGHT"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    RECONCILE = "RECONCILE"


def to_minutes(value: time) -> int:
    """Minutes since midnight for a wall-clock time."""
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    """Inverse of `to_minutes`; 1440 is not representable and raises ValueError."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def stored_day_of_week(day: date) -> int:
    """Day-of-week in the stored convention: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True, order=True)
class TimeWindow:
    """Half-open interval ``[start, end)`` of minutes since midnight.

    ``end`` may equal 1440 so a window can run up to midnight.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise ValueError(f"invalid window [{self.start}, {self.end})")

    @classmethod
    def from_times(cls, start: time, end: time) -> TimeWindow:
        """Build a window from wall-clock times; an ``end`` of 00:00 means midnight."""
        end_minutes = to_minutes(end) or MINUTES_PER_DAY
        return cls(to_minutes(start), end_minutes)

    def overlaps(self, other: TimeWindow) -> bool:
        """``[a,b)`` and ``[c,d)`` conflict iff ``a < d and c < b``."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: TimeWindow) -> bool:
        """True when ``other`` lies entirely inside this window."""
        return self.start <= other.start and other.end <= self.end

    def intersection(self, other: TimeWindow) -> TimeWindow | None:
        """Overlap of two windows, or None when they do not overlap."""
        start, end = max(self.start, other.start), min(self.end, other.end)
        return TimeWindow(start, end) if start < end else None

    @property
    def start_time(self) -> time:
        """Window start as a wall-clock time."""
        return from_minutes(self.start)

    @property
    def end_time(self) -> time:
        """Window end as a wall-clock time (midnight renders as 00:00)."""
        return from_minutes(self.end % MINUTES_PER_DAY)

    def __str__(self) -> str:
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


@dataclass(frozen=True)
class ScheduleRow:
    """One weekly-recurring opening interval (store or employee)."""

    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool = True

    @property
    def spans_interval(self) -> bool:
        """True when the row ends after it starts (00:00 as an end means midnight)."""
        return to_minutes(self.start_time) < (to_minutes(self.end_time) or MINUTES_PER_DAY)

    @property
    def window(self) -> TimeWindow:
        """The row's interval as a TimeWindow."""
        return TimeWindow.from_times(self.start_time, self.end_time)


@dataclass(frozen=True)
class StoreService:
    """A priced service offered by a store."""

    id: str
    store_id: str
    name: str
    price_minor: int
    duration_minutes: int
    is_active: bool = True

    @property
    def duration(self) -> timedelta:
        """Service duration as a timedelta."""
        return timedelta(minutes=self.duration_minutes)


@dataclass(frozen=True)
class Owner:
    """A store owner and payout destination."""

    id: str
    name: str
    bank_account_ref: str | None
    consecutive_payout_failures: int = 0


def combine(day: date, at: time, tzinfo=None) -> datetime:
    """Combine a booking date and a wall-clock time into a datetime."""
    return datetime.combine(day, at, tzinfo=tzinfo)
