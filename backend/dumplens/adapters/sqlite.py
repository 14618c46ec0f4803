"""
This module provides the SQLite store adapter.

It includes the `SQLiteAdapter` class, which implements the `StoreAdapter`
interface for one session's database file. The adapter uses the `aiosqlite`
library so statements run off the event loop, routes each statement to the
read or write path, and exposes the table introspection the query layer
needs (`sqlite_master` listing and `PRAGMA table_info`).
"""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiosqlite
from dumplens.adapters.base import StoreAdapter
from dumplens.core.config import settings
from dumplens.core.error_utils import truncate_error_message
from dumplens.core.exceptions import QueryError, StoreUnavailableError
from dumplens.core.retry import call_with_backoff
from dumplens.parsing.base import classify_query

logger = logging.getLogger(__name__)

# sqlite3 reports "one statement at a time" as a Warning on older interpreters
_STORE_ERRORS = (sqlite3.Error, sqlite3.Warning)

_LIST_TABLES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite_%' "
    "ORDER BY name"
)


def _dict_factory(cursor: sqlite3.Cursor, row: tuple) -> Dict[str, Any]:
    return {column[0]: row[index] for index, column in enumerate(cursor.description)}


def quote_identifier(name: str) -> str:
    """Double-quote an identifier for SQLite, escaping embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


class SQLiteAdapter(StoreAdapter):
    """
    SQLite store adapter.

    One adapter owns at most one connection. The connection runs in
    autocommit mode: every write is durable as soon as it returns, which is
    what lets a dump populate the store statement by statement without a
    surrounding transaction.
    """

    def __init__(
        self,
        path: Union[str, Path],
        timeout: Optional[float] = None,
        busy_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        """
        Initializes the SQLiteAdapter.

        Args:
            path: The database file. Created on first connect.
            timeout: Seconds SQLite waits on a locked file before failing.
            busy_retries: Extra attempts for a statement that still hits a
                lock after ``timeout``.
            retry_delay: Seconds before the first of those attempts.
        """
        self.path = Path(path)
        self.timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout
        self.busy_retries = (
            settings.STORE_BUSY_RETRIES if busy_retries is None else busy_retries
        )
        self.retry_delay = (
            settings.STORE_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        )
        self.conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """
        Opens the database file.

        Raises:
            StoreUnavailableError: If the file cannot be opened
        """
        if self.conn is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(
                str(self.path), timeout=self.timeout, isolation_level=None
            )
        except (OSError, sqlite3.Error) as e:
            logger.error("Failed to open SQLite store %s: %s", self.path, e)
            raise StoreUnavailableError(
                f"Cannot open store: {truncate_error_message(e)}"
            ) from e

        conn.row_factory = _dict_factory
        self.conn = conn
        logger.debug("SQLite store opened: %s", self.path)

    async def disconnect(self) -> None:
        """Closes the connection. Safe to call when not connected."""
        if self.conn is None:
            return
        conn, self.conn = self.conn, None
        try:
            await asyncio.wait_for(conn.close(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("SQLite store close timed out: %s", self.path)
            raise StoreUnavailableError("Timed out closing store") from e
        except sqlite3.Error as e:
            logger.warning(f"Error closing SQLite store: {e}")
            raise StoreUnavailableError(
                f"Cannot close store: {truncate_error_message(e)}"
            ) from e

    def _require_connection(self) -> aiosqlite.Connection:
        if self.conn is None:
            raise StoreUnavailableError("Store is not connected")
        return self.conn

    async def execute(self, sql: str) -> List[Dict[str, Any]]:
        """
        Executes one SQL statement.

        Reads (SELECT, WITH, PRAGMA) return their rows as dictionaries.
        Everything else returns a single summary row with ``changes``,
        ``last_insert_id`` and ``message``.

        A statement that fails because another connection holds the lock is
        retried with backoff up to ``busy_retries`` times.

        Args:
            sql: The statement to execute.

        Returns:
            A list of dictionaries.

        Raises:
            QueryError: If SQLite rejects the statement
        """
        conn = self._require_connection()
        try:
            return await call_with_backoff(
                self._run,
                conn,
                sql,
                retries=self.busy_retries,
                initial_delay=self.retry_delay,
            )
        except _STORE_ERRORS as e:
            raise QueryError(str(e), sql=sql) from e

    async def _run(self, conn: aiosqlite.Connection, sql: str) -> List[Dict[str, Any]]:
        async with conn.execute(sql) as cursor:
            if classify_query(sql) == "read":
                return list(await cursor.fetchall())
            changes = max(cursor.rowcount, 0)
            return [
                {
                    "changes": changes,
                    "last_insert_id": cursor.lastrowid,
                    "message": f"Query executed successfully. {changes} row(s) affected.",
                }
            ]

    async def list_tables(self) -> List[str]:
        """Returns user table names in alphabetical order."""
        rows = await self.execute(_LIST_TABLES_SQL)
        return [row["name"] for row in rows]

    async def describe_table(self, name: str) -> List[Dict[str, Any]]:
        """
        Returns ``PRAGMA table_info`` for one table.

        Each entry has ``cid``, ``name``, ``type``, ``notnull``,
        ``dflt_value`` and ``pk``.

        Raises:
            QueryError: If the table does not exist
        """
        rows = await self.execute(f"PRAGMA table_info({quote_identifier(name)})")
        if not rows:
            raise QueryError(f"no such table: {name}")
        return rows

    async def health_check(self) -> bool:
        """Returns True when a trivial query succeeds."""
        if self.conn is None:
            return False
        try:
            await self.execute("SELECT 1")
            return True
        except QueryError as e:
            logger.warning(f"SQLite health check failed: {e}")
            return False
