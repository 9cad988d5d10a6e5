"""Schema migrations for the note store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def migration_scripts(migrations_dir: Path = MIGRATIONS_DIR) -> dict[int, Path]:
    scripts: dict[int, Path] = {}
    for script in sorted(migrations_dir.glob("*.sql")):
        prefix = script.name.split("_", 1)[0]
        if prefix.isdigit():
            scripts[int(prefix)] = script
    return scripts


def upgrade(
    conn: sqlite3.Connection,
    old_version: int,
    new_version: int,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> None:
    """Apply every migration in ``(old_version, new_version]`` in order.

    The caller owns the surrounding transaction. Statements are executed one
    at a time because ``executescript`` would commit it early.
    """
    scripts = migration_scripts(migrations_dir)
    for version in range(old_version + 1, new_version + 1):
        script = scripts.get(version)
        if script is None:
            raise sqlite3.DatabaseError(f"No migration for schema version {version}")
        logger.info("Applying schema migration %s", script.name)
        for statement in _statements(script.read_text(encoding="utf-8")):
            conn.execute(statement)


def _statements(sql: str) -> list[str]:
    statements: list[str] = []
    pending = ""
    for line in sql.splitlines(keepends=True):
        pending += line
        if sqlite3.complete_statement(pending):
            statements.append(pending.strip())
            pending = ""
    if pending.strip():
        statements.append(pending.strip())
    return statements
