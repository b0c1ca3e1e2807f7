"""Storage session: timed statement execution over one SQLite connection."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from .errors import (
    CatalogError,
    ConnectivityError,
    ExecutionError,
    StatementError,
    StatementTimeoutError,
)
from .statements import SQLValue

logger = logging.getLogger(__name__)

# SQLite VM instructions between deadline checks.
_PROGRESS_OPS = 1000

_PREPARE_ERROR_MARKERS = (
    "syntax error",
    "incomplete input",
    "unrecognized token",
    "no such table",
    "no such column",
    "no such function",
    "incorrect number of bindings",
)


class _Deadline:
    """Progress handler that aborts the running statement once expired."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout
        self.expired = False

    def __call__(self) -> int:
        if time.monotonic() >= self._expires_at:
            self.expired = True
            return 1
        return 0


class StorageSession:
    """Runs parameterized statements against a single connection.

    Every call is bounded by a timeout (the session default unless one
    is passed). Driver errors are logged and re-raised as catalog errors:

    - ``StatementError``: the SQL text was rejected
    - ``ExecutionError``: the statement failed while running
    - ``StatementTimeoutError``: the statement outlived its timeout
    - ``ConnectivityError``: the connection is closed or unusable

    Args:
        connection: Open ``sqlite3`` connection, ideally in autocommit mode.
        timeout: Default per-call timeout in seconds.
    """

    def __init__(self, connection: sqlite3.Connection, timeout: float = 5.0) -> None:
        self._conn = connection
        self.timeout = timeout

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def execute(
        self,
        sql: str,
        params: Sequence[SQLValue] = (),
        *,
        timeout: float | None = None,
    ) -> int:
        """Run a statement and return the number of affected rows."""
        with self._guard(sql, timeout):
            cursor = self._conn.execute(sql, tuple(params))
        return cursor.rowcount

    def execute_returning_id(
        self,
        sql: str,
        params: Sequence[SQLValue] = (),
        *,
        timeout: float | None = None,
    ) -> tuple[int, int]:
        """Run an INSERT and return ``(affected_rows, generated_id)``."""
        with self._guard(sql, timeout):
            cursor = self._conn.execute(sql, tuple(params))
        if cursor.lastrowid is None:
            raise ExecutionError(f"No generated ID for statement: {sql}")
        return cursor.rowcount, cursor.lastrowid

    def query_one(
        self,
        sql: str,
        params: Sequence[SQLValue] = (),
        *,
        timeout: float | None = None,
    ) -> sqlite3.Row | None:
        """Return the first row of a query, or None when nothing matches."""
        with self._guard(sql, timeout):
            return self._conn.execute(sql, tuple(params)).fetchone()

    def query_all(
        self,
        sql: str,
        params: Sequence[SQLValue] = (),
        *,
        timeout: float | None = None,
    ) -> list[sqlite3.Row]:
        with self._guard(sql, timeout):
            return self._conn.execute(sql, tuple(params)).fetchall()

    def ping(self, *, timeout: float | None = None) -> None:
        """Round-trip a trivial query; raise ConnectivityError on failure."""
        try:
            self.query_one("SELECT 1", timeout=timeout)
        except CatalogError as exc:
            logger.error("Error %s pinging DB", exc)
            raise ConnectivityError(f"Ping failed: {exc}") from exc

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> StorageSession:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @contextmanager
    def _guard(self, sql: str, timeout: float | None) -> Iterator[None]:
        deadline = _Deadline(self.timeout if timeout is None else timeout)
        try:
            self._conn.set_progress_handler(deadline, _PROGRESS_OPS)
        except sqlite3.Error as exc:
            logger.error("Error %s when using DB connection", exc)
            raise ConnectivityError(str(exc)) from exc

        try:
            yield
        except sqlite3.Error as exc:
            raise _classify(exc, sql, deadline) from exc
        finally:
            self._conn.set_progress_handler(None, 0)


def _classify(exc: sqlite3.Error, sql: str, deadline: _Deadline) -> CatalogError:
    """Map a driver error onto the catalog error taxonomy, logging it."""
    message = str(exc)
    lowered = message.lower()

    if deadline.expired:
        logger.error("Statement timed out after %.3fs: %s", deadline.timeout, sql)
        return StatementTimeoutError(deadline.timeout)
    if isinstance(exc, sqlite3.ProgrammingError) and "closed" in lowered:
        logger.error("Error %s when using DB connection", message)
        return ConnectivityError(message)
    if isinstance(exc, sqlite3.IntegrityError):
        logger.error("Error %s when executing SQL statement", message)
        return ExecutionError(message)
    if any(marker in lowered for marker in _PREPARE_ERROR_MARKERS):
        logger.error("Error %s when preparing SQL statement: %s", message, sql)
        return StatementError(message)
    logger.error("Error %s when executing SQL statement", message)
    return ExecutionError(message)
