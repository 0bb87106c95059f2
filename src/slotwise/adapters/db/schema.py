"""Relational schema.

SQLAlchemy Core tables for stores, schedules, bookings, the ledger and
payouts. The initial Alembic revision creates exactly these tables; keep the
two in step.

Constraints (enforced here):

| Constraint                                   | Purpose                                |
|----------------------------------------------|----------------------------------------|
| CHECK(day_of_week BETWEEN 0 AND 6)           | 0 = Sunday ... 6 = Saturday            |
| CHECK(paid_amount_minor BETWEEN 0 AND total) | a booking is never over- or under-paid |
| CHECK(amount_minor > 0)                      | ledger direction carries the sign      |
| UNIQUE(external_reference)                   | a gateway payment is recorded once     |
| PK(store_id, booking_date) on slot_locks     | one allocation lock per store and day  |
| PK(name) on job_locks                        | one holder per batch job               |
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Time,
    text,
    true,
)

from .metadata import metadata
from .sa_types import MINOR_UNITS, UTCDateTime

__all__ = [
    "owners",
    "stores",
    "store_availability",
    "store_services",
    "employees",
    "store_employees",
    "employee_availability",
    "bookings",
    "slot_locks",
    "ledger_entries",
    "payouts",
    "job_locks",
]

ID = String(64)
STATUS = String(16)


def _in(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


BOOKING_STATUSES = ("PENDING", "CONFIRMED", "COMPLETED", "CANCELLED")
PAYMENT_STATUSES = ("PENDING", "PARTIAL", "FULL", "REFUNDED")
LEDGER_DIRECTIONS = ("CAPTURE", "REFUND", "PAYOUT")
ENTRY_PAYOUT_STATUSES = ("PENDING", "IN_FLIGHT", "PAIDOUT", "RECONCILE")
BATCH_STATUSES = ("IN_FLIGHT", "SUCCEEDED", "FAILED", "RECONCILE")


owners = Table(
    "owners",
    metadata,
    Column("id", ID, primary_key=True),
    Column("name", String(200), nullable=False),
    Column(
        "bank_account_ref",
        String(200),
        nullable=True,
        comment="Payout destination (provider fund-account id).",
    ),
    Column(
        "consecutive_payout_failures",
        Integer,
        nullable=False,
        server_default=text("0"),
    ),
)

stores = Table(
    "stores",
    metadata,
    Column("id", ID, primary_key=True),
    Column("owner_id", ID, ForeignKey("owners.id"), nullable=False),
    Column("name", String(200), nullable=False),
    Column("location", String(500), nullable=True),
    Index(None, "owner_id"),
)

store_availability = Table(
    "store_availability",
    metadata,
    Column("id", ID, primary_key=True),
    Column("store_id", ID, ForeignKey("stores.id"), nullable=False),
    Column("day_of_week", Integer, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    CheckConstraint("day_of_week BETWEEN 0 AND 6", name="day_of_week_range"),
    Index(None, "store_id", "day_of_week"),
)

store_services = Table(
    "store_services",
    metadata,
    Column("id", ID, primary_key=True),
    Column("store_id", ID, ForeignKey("stores.id"), nullable=False),
    Column("name", String(200), nullable=False),
    Column("price_minor", MINOR_UNITS, nullable=False),
    Column("duration_minutes", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    CheckConstraint("price_minor >= 0", name="non_negative_price"),
    CheckConstraint("duration_minutes > 0", name="positive_duration"),
    Index(None, "store_id"),
)

employees = Table(
    "employees",
    metadata,
    Column("id", ID, primary_key=True),
    Column("name", String(200), nullable=False),
)

store_employees = Table(
    "store_employees",
    metadata,
    Column("store_id", ID, ForeignKey("stores.id"), primary_key=True),
    Column("employee_id", ID, ForeignKey("employees.id"), primary_key=True),
    Column("role", String(64), nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("joined_at", UTCDateTime(), nullable=True),
    Column("left_at", UTCDateTime(), nullable=True),
)

employee_availability = Table(
    "employee_availability",
    metadata,
    Column("id", ID, primary_key=True),
    Column("employee_id", ID, ForeignKey("employees.id"), nullable=False),
    Column("store_id", ID, ForeignKey("stores.id"), nullable=False),
    Column("day_of_week", Integer, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    CheckConstraint("day_of_week BETWEEN 0 AND 6", name="day_of_week_range"),
    Index(None, "employee_id", "store_id", "day_of_week"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", ID, primary_key=True),
    Column("customer_id", ID, nullable=False, comment="Pre-authenticated customer id."),
    Column("store_id", ID, ForeignKey("stores.id"), nullable=False),
    Column("store_service_id", ID, ForeignKey("store_services.id"), nullable=False),
    Column("employee_id", ID, ForeignKey("employees.id"), nullable=True),
    Column("booking_date", Date, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column(
        "total_price_minor",
        MINOR_UNITS,
        nullable=False,
        comment="Service price snapshotted at booking time.",
    ),
    Column(
        "paid_amount_minor",
        MINOR_UNITS,
        nullable=False,
        server_default=text("0"),
        comment="Materialized sum of the booking's captures minus refunds.",
    ),
    Column("payment_status", STATUS, nullable=False, server_default=text("'PENDING'")),
    Column("status", STATUS, nullable=False, server_default=text("'PENDING'")),
    Column("notes", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    CheckConstraint(
        "paid_amount_minor >= 0 AND paid_amount_minor <= total_price_minor",
        name="paid_within_total",
    ),
    CheckConstraint(_in("status", BOOKING_STATUSES), name="status_values"),
    CheckConstraint(_in("payment_status", PAYMENT_STATUSES), name="payment_status_values"),
    Index(None, "store_id", "booking_date"),
    Index(None, "customer_id"),
)

slot_locks = Table(
    "slot_locks",
    metadata,
    Column("store_id", ID, ForeignKey("stores.id"), primary_key=True),
    Column("booking_date", Date, primary_key=True),
    Column(
        "version",
        Integer,
        nullable=False,
        server_default=text("0"),
        comment="Bumped by every allocation; the UPDATE takes the row lock.",
    ),
    comment="One row per (store, day); serializes booking allocation.",
)

ledger_entries = Table(
    "ledger_entries",
    metadata,
    Column("id", ID, primary_key=True),
    Column("booking_id", ID, ForeignKey("bookings.id"), nullable=True),
    Column("owner_id", ID, ForeignKey("owners.id"), nullable=False),
    Column("direction", STATUS, nullable=False),
    Column("amount_minor", MINOR_UNITS, nullable=False),
    Column("payout_status", STATUS, nullable=False, server_default=text("'PENDING'")),
    Column("payout_id", ID, ForeignKey("payouts.id"), nullable=True),
    Column("provider_reference", String(200), nullable=True),
    Column(
        "external_reference",
        String(200),
        nullable=True,
        unique=True,
        comment="Gateway payment/refund id; makes replays idempotent.",
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    CheckConstraint("amount_minor > 0", name="positive_amount"),
    CheckConstraint(_in("direction", LEDGER_DIRECTIONS), name="direction_values"),
    CheckConstraint(
        _in("payout_status", ENTRY_PAYOUT_STATUSES), name="payout_status_values"
    ),
    Index(None, "booking_id"),
    Index(None, "owner_id", "payout_status"),
    Index(None, "payout_id"),
    comment="Append-only ledger. Only payout lifecycle columns are ever updated.",
)

payouts = Table(
    "payouts",
    metadata,
    Column("id", ID, primary_key=True, comment="Also the provider idempotency key."),
    Column("owner_id", ID, ForeignKey("owners.id"), nullable=False),
    Column("amount_minor", MINOR_UNITS, nullable=False),
    Column("currency", String(3), nullable=False),
    Column("status", STATUS, nullable=False),
    Column("provider_reference", String(200), nullable=True),
    Column("attempted_at", UTCDateTime(), nullable=True),
    Column("completed_at", UTCDateTime(), nullable=True),
    CheckConstraint("amount_minor > 0", name="positive_amount"),
    CheckConstraint(_in("status", BATCH_STATUSES), name="status_values"),
    Index(None, "status"),
    Index(None, "owner_id"),
)

job_locks = Table(
    "job_locks",
    metadata,
    Column("name", String(64), primary_key=True),
    Column("holder", String(128), nullable=False),
    Column("acquired_at", UTCDateTime(), nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
    comment="Single-flight leases for periodic jobs.",
)
