"""SQL statement text for the product table and the batch insert builder.

Only structural text (identifiers and ``?`` placeholders) is ever
concatenated into a statement. Data values travel separately as bind
parameters, flattened row by row so that parameter ``i * width + j``
belongs to row ``i``, column ``j``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .errors import EmptyBatchError
from .models import Product

# Bind values accepted by the product table: TEXT or INTEGER.
SQLValue = str | int

PRODUCT_TABLE = "product"
PRODUCT_COLUMNS = ("product_name", "product_price")

INSERT_PRODUCT_SQL = "INSERT INTO product(product_name, product_price) VALUES (?, ?)"
SELECT_PRICE_BY_NAME_SQL = "SELECT product_price FROM product WHERE product_name = ?"
SELECT_PRODUCTS_BY_PRICE_SQL = (
    "SELECT product_name, product_price FROM product "
    "WHERE product_price >= ? AND product_price <= ?"
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Statement:
    """Statement text plus its positional bind parameters."""

    sql: str
    params: tuple[SQLValue, ...] = ()

    @property
    def placeholder_count(self) -> int:
        return self.sql.count("?")


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def placeholder_group(width: int) -> str:
    """Return one parenthesized placeholder tuple, e.g. ``(?, ?)``."""
    if width < 1:
        raise ValueError("Placeholder group needs at least one column")
    return "(" + ", ".join(["?"] * width) + ")"


def build_multi_insert(
    table: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[SQLValue]],
) -> Statement:
    """Build a single INSERT with one placeholder group per row.

    Args:
        table: Target table name.
        columns: Column names, in the order each row's values appear.
        rows: Row values. Every row must have ``len(columns)`` values.

    Returns:
        Statement whose VALUES groups are joined by commas in input order
        and whose params are the concatenation of every row.

    Raises:
        EmptyBatchError: ``rows`` is empty.
        ValueError: A name is not a plain identifier or a row has the
            wrong number of values.
    """
    if not rows:
        raise EmptyBatchError()

    _check_identifier(table)
    for column in columns:
        _check_identifier(column)

    width = len(columns)
    group = placeholder_group(width)

    params: list[SQLValue] = []
    for index, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(
                f"Row {index} has {len(row)} values, expected {width}"
            )
        params.extend(row)

    sql = (
        f"INSERT INTO {table}({', '.join(columns)}) VALUES "
        + ",".join(group for _ in rows)
    )
    return Statement(sql=sql, params=tuple(params))


def build_batch_insert(products: Sequence[Product]) -> Statement:
    """Build the multi-row product INSERT for ``products``.

    ``[Product("Galaxy", 990), Product("iPad", 500)]`` yields
    ``INSERT INTO product(product_name, product_price) VALUES (?, ?),(?, ?)``
    with params ``("Galaxy", 990, "iPad", 500)``.
    """
    return build_multi_insert(
        PRODUCT_TABLE,
        PRODUCT_COLUMNS,
        [p.bind_values() for p in products],
    )


def iter_batches(products: Sequence[Product], size: int) -> Iterator[Sequence[Product]]:
    """Yield consecutive slices of at most ``size`` products."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for start in range(0, len(products), size):
        yield products[start:start + size]
