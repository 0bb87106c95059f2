"""SLOTWISE test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- integration/  : Real interactions with a database (SQLite file, PostgreSQL).
- functional/   : User-visible flows and features tested at the CLI boundary.
- contract/     : Shared behavior enforced across the memory, SQLite and PostgreSQL adapters.
- e2e/          : CLI commands run against a migrated, seeded database.
- fixtures/     : Shared pytest plugins (engines, containers, the salon world); no tests here.

General guidance
- Keep unit fast and deterministic (no real I/O); prefer fakes over mocks at boundaries.
- Integration hits real dependencies with realistic setup/teardown.
- Functional asserts user-observable results, not internals.
- Contract parametrizes implementations to ensure consistent behavior.
- PostgreSQL tests are skipped when Docker is unavailable.
"""
