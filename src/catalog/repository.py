"""Product insert and lookup operations."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .errors import CatalogError, EmptyBatchError, ExecutionError, ProductNotFoundError
from .models import Product
from .session import StorageSession
from .statements import (
    INSERT_PRODUCT_SQL,
    SELECT_PRICE_BY_NAME_SQL,
    SELECT_PRODUCTS_BY_PRICE_SQL,
    build_batch_insert,
    iter_batches,
)

logger = logging.getLogger(__name__)


class ProductRepository:
    """Reads and writes rows of the product table.

    Every failure is logged here and re-raised to the caller.

    Args:
        session: Storage session to run statements on.
        max_batch_rows: Largest number of rows sent in one INSERT.
    """

    def __init__(self, session: StorageSession, max_batch_rows: int = 500) -> None:
        self.session = session
        self.max_batch_rows = max_batch_rows

    def insert(self, product: Product) -> int:
        """Insert one product and return its generated ID."""
        try:
            rows, product_id = self.session.execute_returning_id(
                INSERT_PRODUCT_SQL, product.bind_values()
            )
        except CatalogError as exc:
            logger.error("Error %s when inserting row into products table", exc)
            raise
        logger.info("%d products created", rows)
        logger.info("Product with ID %d created", product_id)
        return product_id

    def insert_many(self, products: Sequence[Product]) -> int:
        """Insert products with one multi-row INSERT per batch.

        Returns:
            Total number of rows created.

        Raises:
            EmptyBatchError: ``products`` is empty.
        """
        if not products:
            raise EmptyBatchError()

        created = 0
        for batch in iter_batches(products, self.max_batch_rows):
            statement = build_batch_insert(batch)
            logger.debug("query is %s", statement.sql)
            try:
                created += self.session.execute(statement.sql, statement.params)
            except CatalogError as exc:
                logger.error("Error %s when inserting row into products table", exc)
                raise
        logger.info("%d products created simultaneously", created)
        return created

    def select_price(self, product_name: str) -> int:
        """Return the price of the product named exactly ``product_name``.

        Raises:
            ProductNotFoundError: No row has that name.
            ExecutionError: The stored price is not a valid price.
        """
        logger.info("Getting product price")
        row = self.session.query_one(SELECT_PRICE_BY_NAME_SQL, (product_name,))
        if row is None:
            raise ProductNotFoundError(product_name)
        return self._to_product(product_name, row["product_price"]).price

    def select_by_price(self, min_price: int, max_price: int) -> list[Product]:
        """Return products priced within ``[min_price, max_price]``.

        Raises:
            ExecutionError: A matching row does not hold a valid product.
        """
        logger.info("Getting products by price")
        rows = self.session.query_all(SELECT_PRODUCTS_BY_PRICE_SQL, (min_price, max_price))
        return [self._to_product(r["product_name"], r["product_price"]) for r in rows]

    @staticmethod
    def _to_product(name, price) -> Product:
        try:
            return Product(name=name, price=price)
        except (TypeError, ValueError) as exc:
            logger.error("Error %s when reading product row %r", exc, name)
            raise ExecutionError(f"Invalid product row {name!r}: {exc}") from exc
