"""Typer CLI for Jotter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, NoReturn, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from jotter.app.main import run_app
from jotter.core.errors import JotterError
from jotter.core.settings import Settings, load_settings
from jotter.storage.db import Database, open_database
from jotter.storage.note_store import NoteRepository
from jotter.storage.repos.notes import validate_draft

app = typer.Typer(help="Jotter notes CLI")
console = Console()

notes_app = typer.Typer(help="Notes operations")
config_app = typer.Typer(help="Configuration")
db_app = typer.Typer(help="Database operations")

T = TypeVar("T")


@app.command()
def tui() -> None:
    """Run the Textual TUI."""
    run_app()


@notes_app.command("list")
def notes_list() -> None:
    notes = _with_repository(lambda repo: repo.list())
    for note in notes:
        console.print(f"{note.id} | {note.title} | {note.text}", markup=False)


@notes_app.command("add")
def notes_add(title: str, text: str) -> None:
    try:
        draft = validate_draft(title, text)
    except JotterError as exc:
        _fail(exc)
    note_id = _with_repository(lambda repo: repo.add(draft))
    console.print(f"created note {note_id}")


@notes_app.command("delete")
def notes_delete(note_id: int) -> None:
    _with_repository(lambda repo: repo.delete(note_id))
    console.print(f"deleted note {note_id}")


@db_app.command("init")
def db_init() -> None:
    settings = _load()

    async def _run() -> Database:
        database = await open_database(settings)
        await database.close()
        return database

    database = _run_or_fail(_run())
    console.print(f"database {database.path} ready at version {database.version}")


@config_app.command("show")
def config_show() -> None:
    settings = _load()
    console.print(f"data_dir={settings.data_dir}")
    console.print(f"db_timeout_s={settings.db_timeout_s}")
    console.print(f"alert_timeout_s={settings.alert_timeout_s}")
    console.print(f"log_level={settings.log_level}")


app.add_typer(notes_app, name="notes")
app.add_typer(config_app, name="config")
app.add_typer(db_app, name="db")


def _load() -> Settings:
    try:
        settings = load_settings()
    except ValueError as exc:
        _fail(exc)
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    return settings


def _with_repository(action: Callable[[NoteRepository], Awaitable[T]]) -> T:
    settings = _load()

    async def _run() -> T:
        database = await open_database(settings)
        try:
            return await action(NoteRepository(database))
        finally:
            await database.close()

    return _run_or_fail(_run())


def _run_or_fail(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except JotterError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]error:[/red] {exc}")
    raise typer.Exit(code=1) from exc
