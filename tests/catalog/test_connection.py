"""Tests for database bootstrap and the connection pool."""

from __future__ import annotations

import threading
import time

import pytest
from sqlalchemy import exc as sa_exc

from src.common.config import DatabaseSettings
from src.catalog.connection import (
    ConnectionPool,
    connect,
    create_database,
    database_path,
    open_pool,
)
from src.catalog.errors import ConnectivityError
from src.catalog.session import StorageSession


class TestCreateDatabase:
    def test_creates_file_and_directory(self, tmp_path):
        settings = DatabaseSettings(data_dir=str(tmp_path / "nested" / "dir"), name="shop")
        path = create_database(settings)
        assert path == tmp_path / "nested" / "dir" / "shop.db"
        assert path.exists()

    def test_is_idempotent(self, db_settings):
        first = create_database(db_settings)
        second = create_database(db_settings)
        assert first == second == database_path(db_settings)

    def test_unusable_directory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        settings = DatabaseSettings(data_dir=str(blocker), name="shop")
        with pytest.raises(ConnectivityError):
            create_database(settings)


class TestConnect:
    def test_pragmas(self, db_settings):
        create_database(db_settings)
        conn = connect(db_settings)
        try:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
            assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
            assert conn.isolation_level is None
        finally:
            conn.close()


class TestConnectionPool:
    def test_session_yields_storage_session(self, pool):
        with pool.session() as session:
            assert isinstance(session, StorageSession)
            session.ping()

    def test_idle_connection_reused(self, pool):
        with pool.session() as session:
            first = session.connection
        assert pool.idle_count == 1
        with pool.session() as session:
            assert session.connection is first

    def test_bounded_open_connections(self, db_settings):
        settings = db_settings.model_copy(
            update={"max_open_connections": 2, "timeout_seconds": 0.05}
        )
        create_database(settings)
        pool = ConnectionPool(settings)
        try:
            with pool.session(), pool.session():
                with pytest.raises(ConnectivityError, match="Timed out") as exc_info:
                    with pool.session():
                        pass
                assert isinstance(exc_info.value.__cause__, sa_exc.TimeoutError)
            with pool.session():
                pass
        finally:
            pool.close()

    def test_released_slot_unblocks_waiter(self, db_settings):
        settings = db_settings.model_copy(update={"max_open_connections": 1})
        create_database(settings)
        small = ConnectionPool(settings)
        entered = threading.Event()
        release = threading.Event()

        def holder():
            with small.session():
                entered.set()
                release.wait(timeout=2)

        t = threading.Thread(target=holder)
        t.start()
        try:
            assert entered.wait(timeout=2)
            release.set()
            with small.session() as session:
                session.ping()
        finally:
            release.set()
            t.join()
            small.close()

    def test_idle_limit(self, db_settings):
        settings = db_settings.model_copy(
            update={"max_open_connections": 3, "max_idle_connections": 1}
        )
        create_database(settings)
        pool = ConnectionPool(settings)
        try:
            with pool.session(), pool.session(), pool.session():
                pass
            assert pool.idle_count == 1
        finally:
            pool.close()

    def test_expired_connection_not_reused(self, db_settings):
        settings = db_settings.model_copy(update={"connection_max_lifetime_seconds": 0.001})
        create_database(settings)
        pool = ConnectionPool(settings)
        try:
            with pool.session() as session:
                first = session.connection
            time.sleep(0.01)
            with pool.session() as session:
                assert session.connection is not first
                session.ping()
        finally:
            pool.close()

    def test_dead_connection_replaced(self, pool):
        with pool.session() as session:
            first = session.connection
        first.close()
        with pool.session() as session:
            assert session.connection is not first
            session.ping()

    def test_connect_failure_is_connectivity_error(self, pool, monkeypatch):
        def refuse(settings):
            raise ConnectivityError("refused")

        monkeypatch.setattr("src.catalog.connection.connect", refuse)
        with pytest.raises(ConnectivityError, match="refused"):
            with pool.session():
                pass

    def test_closed_pool_refuses_checkout(self, pool):
        pool.close()
        with pytest.raises(ConnectivityError, match="closed"):
            with pool.session():
                pass


class TestOpenPool:
    def test_open_pool_creates_and_pings(self, db_settings):
        with open_pool(db_settings) as pool:
            assert database_path(db_settings).exists()
            with pool.session() as session:
                assert session.query_one("SELECT 1")[0] == 1

    def test_open_pool_unreachable(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(ConnectivityError):
            open_pool(DatabaseSettings(data_dir=str(blocker), name="shop"))
