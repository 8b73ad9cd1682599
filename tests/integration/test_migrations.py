import sqlite3

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from tests.helpers import MIGRATIONS_DIR

TABLES = {
    "rooms",
    "maps",
    "board_rules",
    "teams",
    "team_members",
    "users",
    "user_tokens",
    "questions",
    "checkpoints",
    "question_assignments",
    "dice_rolls",
    "time_logs",
    "audit_logs",
}


def _tables(path: str) -> set[str]:
    conn = sqlite3.connect(path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


def test_creates_schema(tmp_path):
    path = str(tmp_path / "fresh.db")
    applied = SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["0001_initial.sql"]
    assert TABLES | {"_migrations"} <= _tables(path)


def test_rerun_applies_nothing(tmp_path):
    path = str(tmp_path / "fresh.db")
    migrator = SQLiteMigrator(path, MIGRATIONS_DIR)
    migrator.run_migrations()
    assert migrator.run_migrations() == []


def test_down_section_is_not_applied(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_widgets.sql").write_text(
        "CREATE TABLE widgets (id TEXT);\n-- Down\nDROP TABLE widgets;\n"
    )
    path = str(tmp_path / "w.db")
    SQLiteMigrator(path, str(migrations)).run_migrations()
    assert "widgets" in _tables(path)


def test_broken_migration_is_reported(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_broken.sql").write_text("CREATE TABLE oops (;")

    with pytest.raises(RuntimeError, match="0001_broken.sql"):
        SQLiteMigrator(str(tmp_path / "b.db"), str(migrations)).run_migrations()
