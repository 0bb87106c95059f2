"""Domain layer for SLOTWISE.

Contains business rules: schedules and availability windows, booking and
payment state machines, ledger entries, and money helpers. This package is
deliberately technology-agnostic.

Dependency rule: do not import from `slotwise.adapters` or `slotwise.entrypoints`.
"""
