"""
Product catalog database demo

Modules:
- models: Product value object
- statements: SQL statement text and the batch insert builder
- session: Storage session over a single SQLite connection
- connection: Database bootstrap and connection pool
- schema: Product table creation
- repository: Product insert and lookup operations
- main: CLI entry point
"""

from .errors import (
    CatalogError,
    ConnectivityError,
    EmptyBatchError,
    ExecutionError,
    ProductNotFoundError,
    SchemaError,
    StatementError,
    StatementTimeoutError,
)
from .models import Product
from .statements import Statement, build_batch_insert, build_multi_insert

__version__ = "0.1.0"

__all__ = [
    "CatalogError",
    "ConnectivityError",
    "EmptyBatchError",
    "ExecutionError",
    "Product",
    "ProductNotFoundError",
    "SchemaError",
    "Statement",
    "StatementError",
    "StatementTimeoutError",
    "build_batch_insert",
    "build_multi_insert",
]
