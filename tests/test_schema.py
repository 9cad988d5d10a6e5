from __future__ import annotations

import sqlite3

import pytest

from jotter.storage import schema


def test_bundled_migrations_start_at_version_one() -> None:
    scripts = schema.migration_scripts()
    assert sorted(scripts) == [1]
    assert scripts[1].name == "001_notes.sql"


def test_upgrade_applies_only_pending_versions(tmp_path) -> None:
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_first.sql").write_text(
        "CREATE TABLE first (id INTEGER PRIMARY KEY);", encoding="utf-8"
    )
    (migrations / "002_second.sql").write_text(
        "CREATE TABLE second (id INTEGER PRIMARY KEY);\n"
        "CREATE INDEX second_id ON second (id);\n",
        encoding="utf-8",
    )
    (migrations / "README.txt").write_text("ignored", encoding="utf-8")

    conn = sqlite3.connect(":memory:")
    try:
        schema.upgrade(conn, 1, 2, migrations)
        names = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master").fetchall()
        }
    finally:
        conn.close()
    assert names == {"second", "second_id"}


def test_upgrade_without_script_fails(tmp_path) -> None:
    conn = sqlite3.connect(":memory:")
    try:
        with pytest.raises(sqlite3.DatabaseError, match="version 1"):
            schema.upgrade(conn, 0, 1, tmp_path)
    finally:
        conn.close()


def test_upgrade_keeps_caller_transaction_open() -> None:
    conn = sqlite3.connect(":memory:", isolation_level=None)
    try:
        conn.execute("BEGIN")
        schema.upgrade(conn, 0, 1)
        assert conn.in_transaction
        conn.execute("ROLLBACK")
        tables = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
    finally:
        conn.close()
    assert tables == []
