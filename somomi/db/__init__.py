"""SQLite storage for tracked products."""

from .products import Product, ProductDB
from .schema import ensure_schema

__all__ = [
    "Product",
    "ProductDB",
    "ensure_schema",
]
