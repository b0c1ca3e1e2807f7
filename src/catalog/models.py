"""Data models for the catalog storage layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """A product to be written to or read from the product table."""

    name: str
    price: int  # minor currency units

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"Product name must be str, got {type(self.name).__name__}")
        if isinstance(self.price, bool) or not isinstance(self.price, int):
            raise TypeError(f"Product price must be int, got {type(self.price).__name__}")
        if self.price < 0:
            raise ValueError(f"Product price must be non-negative, got {self.price}")

    def bind_values(self) -> tuple[str, int]:
        """Values in product table column order: (product_name, product_price)."""
        return (self.name, self.price)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price": self.price,
        }
