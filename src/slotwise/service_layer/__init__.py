"""Service layer for SLOTWISE.

Implements application use-cases: command handlers, read-side queries, and
transaction boundaries. Calls domain objects and outbound ports defined in
`slotwise.interfaces`.

Dependency rule: may import `slotwise.domain`, `slotwise.interfaces` and
`slotwise.config`, but not `slotwise.adapters` or `slotwise.entrypoints`.
"""
