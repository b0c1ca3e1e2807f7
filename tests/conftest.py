"""Shared test fixtures for the catalog demo."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import DatabaseSettings
from src.catalog.connection import ConnectionPool, connect, create_database
from src.catalog.repository import ProductRepository
from src.catalog.schema import create_product_table
from src.catalog.session import StorageSession


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def db_settings(tmp_path) -> DatabaseSettings:
    """Provide settings pointing to a temporary SQLite database."""
    return DatabaseSettings(data_dir=str(tmp_path), name="test_catalog", timeout_seconds=2.0)


@pytest.fixture
def session(db_settings):
    """Provide an open session on a database with the product table."""
    create_database(db_settings)
    storage = StorageSession(connect(db_settings), timeout=db_settings.timeout_seconds)
    create_product_table(storage)
    yield storage
    storage.close()


@pytest.fixture
def repository(session) -> ProductRepository:
    return ProductRepository(session)


@pytest.fixture
def pool(db_settings):
    create_database(db_settings)
    p = ConnectionPool(db_settings)
    yield p
    p.close()


@pytest.fixture
def sample_products() -> list[tuple[str, int]]:
    """Return the demo rows stored by the CLI."""
    return [("iphone", 950), ("Galaxy", 990), ("iPad", 500)]
