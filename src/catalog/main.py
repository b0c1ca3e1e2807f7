"""CLI entry point for the product catalog demo.

Usage:
    # Provision, insert one product, then a batch of two:
    python -m src.catalog.main insert

    # Same as insert, then look up a price and a price range (default):
    python -m src.catalog.main select

    # Point at another database:
    python -m src.catalog.main select --data-dir /tmp/catalog --db-name shop
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from src.common.config import Settings
from src.common.logging import setup_logging

from .connection import open_pool
from .errors import CatalogError, ProductNotFoundError
from .models import Product
from .repository import ProductRepository
from .schema import create_product_table
from .session import StorageSession

logger = logging.getLogger("src.catalog.main")

DEMO_PRODUCT = Product(name="iphone", price=950)
DEMO_BATCH = [
    Product(name="Galaxy", price=990),
    Product(name="iPad", price=500),
]
DEMO_LOOKUP_NAME = "iphone"
DEMO_MIN_PRICE = 900
DEMO_MAX_PRICE = 1000


def _run_inserts(repo: ProductRepository) -> None:
    try:
        repo.insert(DEMO_PRODUCT)
    except CatalogError as exc:
        logger.error("Insert product failed with error %s", exc)
        raise

    try:
        repo.insert_many(DEMO_BATCH)
    except CatalogError as exc:
        logger.error("Multiple insert failed with error %s", exc)
        raise


def _run_selects(repo: ProductRepository) -> None:
    try:
        price = repo.select_price(DEMO_LOOKUP_NAME)
    except ProductNotFoundError:
        logger.info("Product %s not found in DB", DEMO_LOOKUP_NAME)
    except CatalogError as exc:
        logger.error("Encountered err %s when fetching price from DB", exc)
    else:
        logger.info("Price of %s is %d", DEMO_LOOKUP_NAME, price)

    try:
        products = repo.select_by_price(DEMO_MIN_PRICE, DEMO_MAX_PRICE)
    except CatalogError as exc:
        logger.error("Error %s when selecting product by price", exc)
        raise
    for product in products:
        logger.info("Name: %s Price: %d", product.name, product.price)


def _run_session(mode: str, session: StorageSession, max_batch_rows: int) -> int:
    logger.info("Successfully connected to database")
    try:
        create_product_table(session)
    except CatalogError as exc:
        logger.error("Create product table failed with error %s", exc)
        return 1

    repo = ProductRepository(session, max_batch_rows=max_batch_rows)
    try:
        _run_inserts(repo)
        if mode == "select":
            _run_selects(repo)
    except CatalogError:
        return 1
    return 0


def run(mode: str, settings: Settings) -> int:
    """Run the demo sequence. Returns a process exit status."""
    db = settings.database
    try:
        pool = open_pool(db)
    except CatalogError as exc:
        logger.error("Error %s when getting db connection", exc)
        return 1

    with pool:
        try:
            with pool.session() as session:
                return _run_session(mode, session, db.max_batch_rows)
        except CatalogError as exc:
            logger.error("Error %s when getting db connection", exc)
            return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Product catalog database demo")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["insert", "select"],
        default="select",
        help="insert: provision and insert rows; select: also query them (default)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Settings YAML path (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory holding the database file",
    )
    parser.add_argument(
        "--db-name",
        type=str,
        help="Database name (file stem)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)

    try:
        settings = Settings.load(args.config)
    except ValidationError as exc:
        setup_logging()
        logger.error("Invalid settings: %s", exc)
        return 1

    if args.data_dir:
        settings.database.data_dir = args.data_dir
    if args.db_name:
        settings.database.name = args.db_name
    if args.log_level:
        settings.logging.level = args.log_level

    setup_logging(settings.logging)
    return run(args.mode, settings)


if __name__ == "__main__":
    sys.exit(main())
