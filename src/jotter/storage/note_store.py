"""Async note repository over the shared database handle."""

from __future__ import annotations

import logging

from jotter.core.errors import ValidationError
from jotter.storage.db import Database
from jotter.storage.repos import notes as notes_repo
from jotter.storage.repos.notes import Note, NoteDraft

logger = logging.getLogger(__name__)

NoteList = list[Note]

SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


class NoteRepository:
    """Add, delete and list notes, one transaction per call.

    Each call resolves only after its transaction has committed and raises
    ``TransactionError`` when it aborts. Nothing is cached between calls.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def add(self, draft: NoteDraft) -> int:
        checked = notes_repo.validate_draft(draft.title, draft.text)
        note_id = await self._db.transaction(
            "readwrite", lambda conn: notes_repo.insert_note(conn, checked)
        )
        logger.debug("Added note %s", note_id)
        return note_id

    async def delete(self, note_id: int) -> None:
        if isinstance(note_id, bool) or not isinstance(note_id, int):
            raise ValidationError(f"Invalid note id: {note_id!r}")
        if not SQLITE_INT_MIN <= note_id <= SQLITE_INT_MAX:
            # No row can carry an id SQLite cannot store.
            return
        await self._db.transaction(
            "readwrite", lambda conn: notes_repo.delete_note(conn, note_id)
        )
        logger.debug("Deleted note %s", note_id)

    async def list(self) -> NoteList:
        # Drain the cursor inside the transaction so callers get a full snapshot.
        return await self._db.transaction(
            "readonly", lambda conn: list(notes_repo.iter_notes(conn))
        )
