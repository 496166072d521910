"""Sanity checks for Alembic migrations.

The revisions in ``editor_activity/migrations/versions`` must form a single
linear chain, and the schema they build must match the ORM models the
services query.
"""

from __future__ import annotations

from pathlib import Path
import re

from sqlalchemy import create_engine, inspect

from editor_activity.database import Base
import editor_activity.models  # noqa: F401  (registers tables on Base.metadata)


VERSIONS_DIR = Path(__file__).resolve().parents[1] / "editor_activity" / "migrations" / "versions"
TEST_DB_PATH = Path(__file__).resolve().parents[1] / "test.db"


def _parse_revisions() -> dict[str, str | None]:
    revision_pattern = re.compile(r"^revision:\s*.*?['\"]([^'\"]+)['\"]", re.MULTILINE)
    down_revision_pattern = re.compile(r"^down_revision:\s*.*?=\s*(.+)$", re.MULTILINE)

    revisions: dict[str, str | None] = {}
    for path in VERSIONS_DIR.glob("*.py"):
        text = path.read_text()

        revision_match = revision_pattern.search(text)
        assert revision_match, f"Missing revision identifier in {path.name}"

        down_revision = None
        down_match = down_revision_pattern.search(text)
        if down_match:
            quoted = re.search(r"['\"]([^'\"]+)['\"]", down_match.group(1))
            down_revision = quoted.group(1) if quoted else None

        revisions[revision_match.group(1)] = down_revision

    return revisions


def test_migrations_form_single_linear_chain() -> None:
    revisions = _parse_revisions()
    assert revisions, "No migrations found"

    roots = [rev for rev, down in revisions.items() if down is None]
    assert len(roots) == 1, f"Expected exactly one base revision, found {roots}"

    referenced = [down for down in revisions.values() if down]
    missing = set(referenced) - set(revisions)
    assert not missing, f"Missing migration files referenced by down_revision: {missing}"
    assert len(referenced) == len(set(referenced)), "A revision has more than one child"

    heads = set(revisions) - set(referenced)
    assert len(heads) == 1, f"Multiple migration heads detected: {sorted(heads)}"


def test_migrations_define_downgrade() -> None:
    for path in VERSIONS_DIR.glob("*.py"):
        text = path.read_text()
        assert "def upgrade()" in text, f"{path.name} has no upgrade()"
        assert "def downgrade()" in text, f"{path.name} has no downgrade()"


def test_migrated_schema_matches_models() -> None:
    """Every model table and column exists in the migrated test database."""
    engine = create_engine(f"sqlite:///{TEST_DB_PATH}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())

        for table in Base.metadata.sorted_tables:
            assert table.name in tables, f"Table {table.name} not created by migrations"
            migrated_columns = {column["name"] for column in inspector.get_columns(table.name)}
            model_columns = {column.name for column in table.columns}
            assert model_columns <= migrated_columns, (
                f"{table.name} is missing columns {sorted(model_columns - migrated_columns)}"
            )
    finally:
        engine.dispose()
