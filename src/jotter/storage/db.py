"""SQLite database handle."""

from __future__ import annotations

import asyncio
import functools
import logging
import sqlite3
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Literal, TypeVar

from jotter.core.errors import DatabaseOpenError, TransactionError
from jotter.core.settings import Settings
from jotter.storage import schema

logger = logging.getLogger(__name__)

DB_NAME = "notes"
DB_VERSION = 1

TransactionMode = Literal["readonly", "readwrite"]
T = TypeVar("T")


def db_path(settings: Settings) -> Path:
    return settings.data_dir / f"{DB_NAME}.db"


async def open_database(settings: Settings) -> Database:
    database = Database(db_path(settings), timeout_s=settings.db_timeout_s)
    return await database.open()


class Database:
    """Shared handle to the note store.

    The handle owns one connection and one worker thread. Every storage call
    is queued on that worker, so transactions run one at a time in the order
    they were submitted while the event loop stays free.
    """

    def __init__(
        self, path: Path, version: int = DB_VERSION, timeout_s: float = 5.0
    ) -> None:
        if version < 1:
            raise ValueError(f"Invalid schema version: {version}")
        self._path = path
        self._version = version
        self._timeout_s = timeout_s
        self._conn: sqlite3.Connection | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._opened = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> Database:
        """Open the store, upgrading its schema first when it is older."""
        if self._opened:
            raise DatabaseOpenError(f"Database {self._path} was already opened")
        self._opened = True
        executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"jotter-{DB_NAME}"
        )
        self._executor = executor
        loop = asyncio.get_running_loop()
        pending = loop.run_in_executor(executor, self._open_sync)
        try:
            conn = await asyncio.shield(pending)
        except DatabaseOpenError:
            self._abandon_open()
            raise
        except (sqlite3.Error, OSError) as exc:
            self._abandon_open()
            raise DatabaseOpenError(
                f"Failed to open database {self._path}: {exc}"
            ) from exc
        except BaseException:
            # Cancelled while the worker is still opening.
            pending.add_done_callback(_discard_connection)
            self._abandon_open()
            raise
        if self._executor is not executor:
            conn.close()
            raise DatabaseOpenError(
                f"Database {self._path} was closed while opening"
            )
        self._conn = conn
        logger.info("Opened database %s at version %s", self._path, self._version)
        return self

    async def transaction(
        self, mode: TransactionMode, work: Callable[[sqlite3.Connection], T]
    ) -> T:
        """Run ``work`` inside one transaction and return once it has committed."""
        if mode not in ("readonly", "readwrite"):
            raise ValueError(f"Invalid transaction mode: {mode}")
        conn = self._conn
        if conn is None:
            raise TransactionError(f"Database {self._path} is not open")
        try:
            result = await self._submit(_run_transaction, conn, mode, work)
        except sqlite3.Error as exc:
            logger.debug("Aborted %s transaction on %s: %s", mode, DB_NAME, exc)
            raise TransactionError(
                f"{mode} transaction on {DB_NAME} aborted: {exc}"
            ) from exc
        logger.debug("Committed %s transaction on %s", mode, DB_NAME)
        return result

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        executor, self._executor = self._executor, None
        if executor is None:
            return
        if conn is not None:
            await asyncio.get_running_loop().run_in_executor(executor, conn.close)
        executor.shutdown(wait=False)

    def _abandon_open(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        self._executor = None
        self._opened = False

    async def _submit(self, func: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(func, *args)
        )

    def _open_sync(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            self._path,
            timeout=self._timeout_s,
            isolation_level=None,
            check_same_thread=False,
        )
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                current = conn.execute("PRAGMA user_version").fetchone()[0]
                if current > self._version:
                    raise DatabaseOpenError(
                        f"Database {self._path} is at version {current}, "
                        f"newer than requested version {self._version}"
                    )
                if current < self._version:
                    logger.info(
                        "Upgrading database %s from version %s to %s",
                        self._path,
                        current,
                        self._version,
                    )
                    schema.upgrade(conn, current, self._version)
                    conn.execute(f"PRAGMA user_version = {int(self._version)}")
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        except BaseException:
            conn.close()
            raise
        return conn


def _run_transaction(
    conn: sqlite3.Connection,
    mode: TransactionMode,
    work: Callable[[sqlite3.Connection], T],
) -> T:
    readonly = mode == "readonly"
    if readonly:
        conn.execute("PRAGMA query_only = ON")
    try:
        conn.execute("BEGIN" if readonly else "BEGIN IMMEDIATE")
        try:
            result = work(conn)
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
    finally:
        if readonly:
            conn.execute("PRAGMA query_only = OFF")
    return result


def _discard_connection(future: asyncio.Future[sqlite3.Connection]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()
