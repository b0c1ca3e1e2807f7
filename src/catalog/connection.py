"""SQLite database bootstrap and a bounded connection pool."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import QueuePool

from src.common.config import DatabaseSettings
from .errors import ConnectivityError
from .session import StorageSession

logger = logging.getLogger(__name__)


def database_path(settings: DatabaseSettings) -> Path:
    """Return the database file for ``settings``."""
    return settings.db_path


def create_database(settings: DatabaseSettings) -> Path:
    """Create the database file if it does not exist yet (idempotent).

    Returns:
        Path of the database file.

    Raises:
        ConnectivityError: The directory or file could not be created.
    """
    path = database_path(settings)
    existed = path.exists()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sqlite3.connect(str(path), timeout=settings.timeout_seconds).close()
    except (OSError, sqlite3.Error) as exc:
        logger.error("Error %s when creating DB", exc)
        raise ConnectivityError(f"Cannot create database {path}: {exc}") from exc

    if existed:
        logger.info("Database %s already exists", settings.name)
    else:
        logger.info("Database %s created at %s", settings.name, path)
    return path


def connect(settings: DatabaseSettings) -> sqlite3.Connection:
    """Open a connection in autocommit mode with row factory enabled."""
    path = database_path(settings)
    try:
        conn = sqlite3.connect(
            str(path),
            timeout=settings.timeout_seconds,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.Error as exc:
        logger.error("Error %s when opening DB", exc)
        raise ConnectivityError(f"Cannot open database {path}: {exc}") from exc
    return conn


class ConnectionPool:
    """Bounded pool of SQLite connections on SQLAlchemy's ``QueuePool``.

    At most ``max_open_connections`` connections are checked out at
    once; up to ``max_idle_connections`` are kept for reuse, and any
    connection older than ``connection_max_lifetime_seconds`` is
    replaced on checkout. Idle connections are pinged before they are
    handed out; a dead one is discarded and a fresh one opened.

    Args:
        settings: Database settings.
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        pool_size = min(settings.max_idle_connections, settings.max_open_connections)
        self._pool = QueuePool(
            lambda: connect(settings),
            pool_size=pool_size,
            max_overflow=settings.max_open_connections - pool_size,
            timeout=settings.timeout_seconds,
            recycle=settings.connection_max_lifetime_seconds,
        )
        event.listen(self._pool, "checkout", _ping_on_checkout)
        self._closed = False

    @property
    def idle_count(self) -> int:
        return self._pool.checkedin()

    @contextmanager
    def session(self) -> Iterator[StorageSession]:
        """Check out a connection wrapped in a StorageSession.

        Waits up to ``timeout_seconds`` for a free connection.

        Raises:
            ConnectivityError: Pool is closed, exhausted past the timeout,
                or a new connection could not be opened.
        """
        if self._closed:
            raise ConnectivityError("Connection pool is closed")
        try:
            proxy = self._pool.connect()
        except sa_exc.TimeoutError as exc:
            logger.error(
                "Timed out after %.3fs waiting for a DB connection "
                "(max open: %d)", self.settings.timeout_seconds,
                self.settings.max_open_connections,
            )
            raise ConnectivityError("Timed out waiting for a free connection") from exc
        except sa_exc.DisconnectionError as exc:
            logger.error("Error %s when checking out DB connection", exc)
            raise ConnectivityError(str(exc)) from exc

        try:
            yield StorageSession(proxy.dbapi_connection, timeout=self.settings.timeout_seconds)
        finally:
            proxy.close()

    def close(self) -> None:
        """Close every idle connection and refuse new checkouts."""
        self._closed = True
        self._pool.dispose()
        logger.debug("Connection pool closed")

    def __enter__(self) -> ConnectionPool:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _ping_on_checkout(dbapi_connection, connection_record, connection_proxy) -> None:
    try:
        dbapi_connection.execute("SELECT 1")
    except sqlite3.Error as exc:
        logger.warning("Discarding dead DB connection: %s", exc)
        raise sa_exc.DisconnectionError(str(exc)) from exc


def open_pool(settings: DatabaseSettings) -> ConnectionPool:
    """Create the database, build a pool and verify it with a ping.

    Raises:
        ConnectivityError: Any step failed. The pool is closed first.
    """
    create_database(settings)
    pool = ConnectionPool(settings)
    try:
        with pool.session() as session:
            session.ping()
    except ConnectivityError:
        pool.close()
        raise

    logger.info("Connected to DB %s successfully", settings.name)
    return pool
