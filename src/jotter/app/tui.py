"""Textual-based TUI."""

from __future__ import annotations

import logging
from typing import ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Vertical
from textual.notifications import SeverityLevel
from textual.widgets import Button, DataTable, Footer, Header, Input

from jotter.core.errors import JotterError, ValidationError
from jotter.core.settings import Settings
from jotter.storage.db import Database, db_path
from jotter.storage.note_store import NoteRepository
from jotter.storage.repos.notes import Note, NoteDraft, validate_draft

logger = logging.getLogger(__name__)


class NotesApp(App):
    CSS_PATH = "style.tcss"
    TITLE = "Jotter"
    AUTO_FOCUS = "#title"

    BINDINGS: ClassVar[list[BindingType]] = [
        ("d", "delete_note", "Delete"),
        Binding("delete", "delete_note", "Delete", show=False),
        ("ctrl+r", "refresh", "Refresh"),
    ]

    def __init__(self, settings: Settings, database: Database | None = None) -> None:
        super().__init__()
        self._settings = settings
        self._database = database or Database(
            db_path(settings), timeout_s=settings.db_timeout_s
        )
        self._repository: NoteRepository | None = None

    @property
    def repository(self) -> NoteRepository | None:
        return self._repository

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="form"):
            yield Input(placeholder="Title", id="title")
            yield Input(placeholder="Text", id="text")
            yield Button("Add note", id="add", variant="primary")
        yield DataTable(id="notes", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns("Title", "Text")
        self.query_one("#form", Vertical).disabled = True
        self.run_worker(self._open_store(), group="store")

    async def on_unmount(self) -> None:
        await self._database.close()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add":
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def action_delete_note(self) -> None:
        table = self.query_one(DataTable)
        if self._repository is None or table.row_count == 0:
            return
        row_key, _column_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        if row_key.value is None:
            return
        self.run_worker(self._delete_note(int(row_key.value)), group="store")

    def action_refresh(self) -> None:
        if self._repository is None:
            return
        self.run_worker(self._refresh_notes(), group="store")

    def _submit(self) -> None:
        title = self.query_one("#title", Input).value
        text = self.query_one("#text", Input).value
        try:
            draft = validate_draft(title, text)
        except ValidationError as exc:
            self._alert(str(exc), "error")
            return
        self.run_worker(self._add_note(draft), group="store")

    async def _open_store(self) -> None:
        try:
            await self._database.open()
        except JotterError as exc:
            logger.exception("Failed to open note store")
            self._alert(str(exc), "error")
            return
        self._repository = NoteRepository(self._database)
        self.query_one("#form", Vertical).disabled = False
        self.query_one("#title", Input).focus()
        await self._refresh_notes()

    async def _add_note(self, draft: NoteDraft) -> None:
        if self._repository is None:
            return
        try:
            await self._repository.add(draft)
        except JotterError as exc:
            logger.exception("Failed to add note")
            self._alert(str(exc), "error")
            return
        self._clear_form()
        await self._refresh_notes()

    async def _delete_note(self, note_id: int) -> None:
        if self._repository is None:
            return
        try:
            await self._repository.delete(note_id)
        except JotterError as exc:
            logger.exception("Failed to delete note %s", note_id)
            self._alert(str(exc), "error")
            return
        await self._refresh_notes()

    async def _refresh_notes(self) -> None:
        if self._repository is None:
            return
        try:
            notes = await self._repository.list()
        except JotterError as exc:
            logger.exception("Failed to list notes")
            self._alert(str(exc), "error")
            return
        self._render_notes(notes)

    def _render_notes(self, notes: list[Note]) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for note in notes:
            table.add_row(note.title, note.text, key=str(note.id))

    def _clear_form(self) -> None:
        self.query_one("#title", Input).value = ""
        self.query_one("#text", Input).value = ""
        self.query_one("#title", Input).focus()

    def _alert(self, message: str, severity: SeverityLevel) -> None:
        self.notify(
            message, severity=severity, timeout=self._settings.alert_timeout_s
        )


def run_tui(settings: Settings) -> None:
    app = NotesApp(settings)
    app.run()
