"""Alembic round-trip smoke test for PostgreSQL.

This test validates that our migrations can *upgrade to head* and *downgrade to
base* cleanly on a real PostgreSQL 17 instance started per test by the
`pg_url_base` fixture:

  1) runs `alembic upgrade head`,
  2) asserts the booking and ledger tables exist and enforce their checks,
  3) runs `alembic downgrade base`,
  4) asserts the tables are dropped.
"""

import pytest
from alembic import command
from sqlalchemy import create_engine, insert, inspect
from sqlalchemy.exc import IntegrityError

from slotwise import config
from slotwise.adapters.db.schema import ledger_entries
from tests.fixtures.datagen import OWNER, seed_sql

from .test_migrations_roundtrip_sqlite import EXPECTED_TABLES


def test_alembic_downgrade_upgrade_roundtrip_postgres(pg_url_base: str):
    """Upgrade → assert → Downgrade → assert on a fresh Postgres database."""
    command.upgrade(config.build_alembic_config(pg_url_base), "head")
    eng = create_engine(pg_url_base, future=True, pool_pre_ping=True)

    assert EXPECTED_TABLES <= set(inspect(eng).get_table_names())

    with eng.begin() as c:
        seed_sql(c)
    with pytest.raises(IntegrityError):
        with eng.begin() as c:
            c.execute(
                insert(ledger_entries).values(
                    id="le_1",
                    owner_id=OWNER,
                    direction="CAPTURE",
                    amount_minor=-5,
                    payout_status="PENDING",
                )
            )

    command.downgrade(config.build_alembic_config(pg_url_base), "base")
    assert not EXPECTED_TABLES & set(inspect(eng).get_table_names())

    eng.dispose()
