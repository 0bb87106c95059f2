"""create booking and ledger tables

Revision ID: 3f1c2a9e7b10
Revises:
Create Date: 2026-09-02 10:14:00.000000

"""

# pylint: disable=invalid-name

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from slotwise.adapters.db.sa_types import UTCDateTime

# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9e7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID = sa.String(length=64)
STATUS = sa.String(length=16)


def _schedule_columns(table: str) -> list[sa.schema.SchemaItem]:
    return [
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint(
            "day_of_week BETWEEN 0 AND 6", name=op.f(f"ck_{table}_day_of_week_range")
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "owners",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column(
            "bank_account_ref",
            sa.String(length=200),
            nullable=True,
            comment="Payout destination (provider fund-account id).",
        ),
        sa.Column(
            "consecutive_payout_failures",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_owners")),
    )
    op.create_table(
        "stores",
        sa.Column("id", ID, nullable=False),
        sa.Column("owner_id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["owners.id"], name=op.f("fk_stores_owner_id_owners")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_stores")),
    )
    op.create_index(op.f("ix_stores_owner_id"), "stores", ["owner_id"])

    op.create_table(
        "store_availability",
        sa.Column("id", ID, nullable=False),
        sa.Column("store_id", ID, nullable=False),
        *_schedule_columns("store_availability"),
        sa.ForeignKeyConstraint(
            ["store_id"],
            ["stores.id"],
            name=op.f("fk_store_availability_store_id_stores"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_store_availability")),
    )
    op.create_index(
        op.f("ix_store_availability_store_id_day_of_week"),
        "store_availability",
        ["store_id", "day_of_week"],
    )

    op.create_table(
        "store_services",
        sa.Column("id", ID, nullable=False),
        sa.Column("store_id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("price_minor", sa.BigInteger(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint(
            "price_minor >= 0", name=op.f("ck_store_services_non_negative_price")
        ),
        sa.CheckConstraint(
            "duration_minutes > 0", name=op.f("ck_store_services_positive_duration")
        ),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], name=op.f("fk_store_services_store_id_stores")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_store_services")),
    )
    op.create_index(op.f("ix_store_services_store_id"), "store_services", ["store_id"])

    op.create_table(
        "employees",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_employees")),
    )
    op.create_table(
        "store_employees",
        sa.Column("store_id", ID, nullable=False),
        sa.Column("employee_id", ID, nullable=False),
        sa.Column("role", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("joined_at", UTCDateTime(), nullable=True),
        sa.Column("left_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], name=op.f("fk_store_employees_store_id_stores")
        ),
        sa.ForeignKeyConstraint(
            ["employee_id"],
            ["employees.id"],
            name=op.f("fk_store_employees_employee_id_employees"),
        ),
        sa.PrimaryKeyConstraint(
            "store_id", "employee_id", name=op.f("pk_store_employees")
        ),
    )
    op.create_table(
        "employee_availability",
        sa.Column("id", ID, nullable=False),
        sa.Column("employee_id", ID, nullable=False),
        sa.Column("store_id", ID, nullable=False),
        *_schedule_columns("employee_availability"),
        sa.ForeignKeyConstraint(
            ["employee_id"],
            ["employees.id"],
            name=op.f("fk_employee_availability_employee_id_employees"),
        ),
        sa.ForeignKeyConstraint(
            ["store_id"],
            ["stores.id"],
            name=op.f("fk_employee_availability_store_id_stores"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_employee_availability")),
    )
    op.create_index(
        op.f("ix_employee_availability_employee_id_store_id_day_of_week"),
        "employee_availability",
        ["employee_id", "store_id", "day_of_week"],
    )

    op.create_table(
        "bookings",
        sa.Column("id", ID, nullable=False),
        sa.Column("customer_id", ID, nullable=False, comment="Pre-authenticated customer id."),
        sa.Column("store_id", ID, nullable=False),
        sa.Column("store_service_id", ID, nullable=False),
        sa.Column("employee_id", ID, nullable=True),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column(
            "total_price_minor",
            sa.BigInteger(),
            nullable=False,
            comment="Service price snapshotted at booking time.",
        ),
        sa.Column(
            "paid_amount_minor",
            sa.BigInteger(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Materialized sum of the booking's captures minus refunds.",
        ),
        sa.Column("payment_status", STATUS, nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("status", STATUS, nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.CheckConstraint(
            "paid_amount_minor >= 0 AND paid_amount_minor <= total_price_minor",
            name=op.f("ck_bookings_paid_within_total"),
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED')",
            name=op.f("ck_bookings_status_values"),
        ),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'PARTIAL', 'FULL', 'REFUNDED')",
            name=op.f("ck_bookings_payment_status_values"),
        ),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], name=op.f("fk_bookings_store_id_stores")
        ),
        sa.ForeignKeyConstraint(
            ["store_service_id"],
            ["store_services.id"],
            name=op.f("fk_bookings_store_service_id_store_services"),
        ),
        sa.ForeignKeyConstraint(
            ["employee_id"], ["employees.id"], name=op.f("fk_bookings_employee_id_employees")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_bookings")),
    )
    op.create_index(
        op.f("ix_bookings_store_id_booking_date"), "bookings", ["store_id", "booking_date"]
    )
    op.create_index(op.f("ix_bookings_customer_id"), "bookings", ["customer_id"])

    op.create_table(
        "slot_locks",
        sa.Column("store_id", ID, nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Bumped by every allocation; the UPDATE takes the row lock.",
        ),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], name=op.f("fk_slot_locks_store_id_stores")
        ),
        sa.PrimaryKeyConstraint("store_id", "booking_date", name=op.f("pk_slot_locks")),
        comment="One row per (store, day); serializes booking allocation.",
    )

    op.create_table(
        "payouts",
        sa.Column("id", ID, nullable=False, comment="Also the provider idempotency key."),
        sa.Column("owner_id", ID, nullable=False),
        sa.Column("amount_minor", sa.BigInteger(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("status", STATUS, nullable=False),
        sa.Column("provider_reference", sa.String(length=200), nullable=True),
        sa.Column("attempted_at", UTCDateTime(), nullable=True),
        sa.Column("completed_at", UTCDateTime(), nullable=True),
        sa.CheckConstraint("amount_minor > 0", name=op.f("ck_payouts_positive_amount")),
        sa.CheckConstraint(
            "status IN ('IN_FLIGHT', 'SUCCEEDED', 'FAILED', 'RECONCILE')",
            name=op.f("ck_payouts_status_values"),
        ),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["owners.id"], name=op.f("fk_payouts_owner_id_owners")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_payouts")),
    )
    op.create_index(op.f("ix_payouts_status"), "payouts", ["status"])
    op.create_index(op.f("ix_payouts_owner_id"), "payouts", ["owner_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", ID, nullable=False),
        sa.Column("booking_id", ID, nullable=True),
        sa.Column("owner_id", ID, nullable=False),
        sa.Column("direction", STATUS, nullable=False),
        sa.Column("amount_minor", sa.BigInteger(), nullable=False),
        sa.Column("payout_status", STATUS, nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("payout_id", ID, nullable=True),
        sa.Column("provider_reference", sa.String(length=200), nullable=True),
        sa.Column(
            "external_reference",
            sa.String(length=200),
            nullable=True,
            comment="Gateway payment/refund id; makes replays idempotent.",
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.CheckConstraint("amount_minor > 0", name=op.f("ck_ledger_entries_positive_amount")),
        sa.CheckConstraint(
            "direction IN ('CAPTURE', 'REFUND', 'PAYOUT')",
            name=op.f("ck_ledger_entries_direction_values"),
        ),
        sa.CheckConstraint(
            "payout_status IN ('PENDING', 'IN_FLIGHT', 'PAIDOUT', 'RECONCILE')",
            name=op.f("ck_ledger_entries_payout_status_values"),
        ),
        sa.ForeignKeyConstraint(
            ["booking_id"], ["bookings.id"], name=op.f("fk_ledger_entries_booking_id_bookings")
        ),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["owners.id"], name=op.f("fk_ledger_entries_owner_id_owners")
        ),
        sa.ForeignKeyConstraint(
            ["payout_id"], ["payouts.id"], name=op.f("fk_ledger_entries_payout_id_payouts")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_ledger_entries")),
        sa.UniqueConstraint(
            "external_reference", name=op.f("uq_ledger_entries_external_reference")
        ),
        comment="Append-only ledger. Only payout lifecycle columns are ever updated.",
    )
    op.create_index(op.f("ix_ledger_entries_booking_id"), "ledger_entries", ["booking_id"])
    op.create_index(
        op.f("ix_ledger_entries_owner_id_payout_status"),
        "ledger_entries",
        ["owner_id", "payout_status"],
    )
    op.create_index(op.f("ix_ledger_entries_payout_id"), "ledger_entries", ["payout_id"])

    op.create_table(
        "job_locks",
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("holder", sa.String(length=128), nullable=False),
        sa.Column("acquired_at", UTCDateTime(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("name", name=op.f("pk_job_locks")),
        comment="Single-flight leases for periodic jobs.",
    )


def downgrade() -> None:
    """Downgrade schema."""

    for table in (
        "job_locks",
        "ledger_entries",
        "payouts",
        "slot_locks",
        "bookings",
        "employee_availability",
        "store_employees",
        "employees",
        "store_services",
        "store_availability",
        "stores",
        "owners",
    ):
        op.drop_table(table)
