"""Notes repository."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass

from jotter.core.errors import ValidationError


@dataclass(frozen=True)
class NoteDraft:
    title: str
    text: str


@dataclass(frozen=True)
class Note:
    id: int
    title: str
    text: str


def validate_draft(title: object, text: object) -> NoteDraft:
    """Build a draft, rejecting missing or empty fields."""
    if not isinstance(title, str) or not isinstance(text, str):
        raise ValidationError("Note title and text must be strings")
    if not title or not text:
        raise ValidationError("Please fill all the fields")
    try:
        title.encode("utf-8")
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError("Note title and text must be valid UTF-8") from exc
    return NoteDraft(title=title, text=text)


def insert_note(conn: sqlite3.Connection, draft: NoteDraft) -> int:
    cur = conn.execute(
        "INSERT INTO notes (title, text) VALUES (?, ?)",
        (draft.title, draft.text),
    )
    return int(cur.lastrowid)


def delete_note(conn: sqlite3.Connection, note_id: int) -> None:
    conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))


def iter_notes(conn: sqlite3.Connection) -> Iterator[Note]:
    cursor = conn.execute("SELECT id, title, text FROM notes ORDER BY id")
    for row in cursor:
        yield Note(id=row[0], title=row[1], text=row[2])
