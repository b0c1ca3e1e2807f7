"""Product table schema management."""

from __future__ import annotations

import logging

from .errors import CatalogError, SchemaError
from .session import StorageSession

logger = logging.getLogger(__name__)

_CREATE_PRODUCT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS product (
    product_id INTEGER PRIMARY KEY AUTOINCREMENT,
    product_name TEXT,
    product_price INTEGER,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
)
"""


def create_product_table(session: StorageSession) -> None:
    """Create the product table (idempotent).

    Raises:
        SchemaError: The DDL statement was rejected.
    """
    try:
        rows = session.execute(_CREATE_PRODUCT_TABLE_SQL)
    except CatalogError as exc:
        logger.error("Error %s when creating product table", exc)
        raise SchemaError(str(exc)) from exc
    logger.info("Rows affected when creating table: %d", max(rows, 0))
