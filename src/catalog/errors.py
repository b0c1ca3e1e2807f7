"""Catalog exceptions."""


class CatalogError(Exception):
    """Base exception for catalog storage failures."""
    pass


class ConnectivityError(CatalogError):
    """The database could not be reached, opened or pinged."""


class SchemaError(CatalogError):
    """A DDL statement was rejected."""


class StatementError(CatalogError):
    """SQL text was malformed or rejected before it could run."""


class ExecutionError(CatalogError):
    """A prepared statement failed while running."""


class StatementTimeoutError(ExecutionError):
    def __init__(self, timeout: float):
        super().__init__(f"Statement exceeded timeout of {timeout:.3f}s")
        self.timeout = timeout


class ProductNotFoundError(CatalogError):
    def __init__(self, product_name: str):
        super().__init__(f"Product not found: {product_name}")
        self.product_name = product_name


class EmptyBatchError(CatalogError, ValueError):
    def __init__(self):
        super().__init__("Batch insert requires at least one row")
