"""Unit tests for the packaged Alembic migration scripts."""

from alembic.script import ScriptDirectory

from slotwise import config


def test_migration_scripts_load():
    """Every revision module imports cleanly and forms a single history."""
    script = ScriptDirectory.from_config(config.build_alembic_config())

    revisions = list(script.walk_revisions())

    assert [r.revision for r in revisions] == ["3f1c2a9e7b10"]
    assert script.get_heads() == ["3f1c2a9e7b10"]
    for rev in revisions:
        assert callable(rev.module.upgrade)
        assert callable(rev.module.downgrade)
