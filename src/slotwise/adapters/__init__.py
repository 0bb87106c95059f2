"""Adapters: concrete implementations of the ports in `slotwise.interfaces`.

SQLAlchemy-backed adapters target PostgreSQL and SQLite; in-memory adapters
back unit tests and demos.
"""
