"""Product CRUD operations and persisted lifecycle transitions."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from ..freshness import (
    AlreadyConsumedError,
    FreshnessStatus,
    ProductTimeline,
    UrgencyTier,
    apply_consumption,
    is_urgent,
    open_product,
    validate_timeline,
)
from .schema import ensure_schema

if TYPE_CHECKING:
    from ..freshness import FreshnessEngine

logger = logging.getLogger(__name__)


@dataclass
class Product:
    """A tracked item and its freshness timeline."""

    name: str
    timeline: ProductTimeline
    category: str = "기타"
    location: str = ""
    memo: str = ""
    id: int | None = None


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _row_to_product(row: sqlite3.Row) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        category=row["category"],
        location=row["location"],
        memo=row["memo"],
        timeline=ProductTimeline(
            estimated_life_days=row["estimated_life_days"],
            opened_at=_parse_date(row["opened_at"]),
            explicit_expiry_at=_parse_date(row["explicit_expiry_at"]),
            consumed_at=_parse_date(row["consumed_at"]),
        ),
    )


class ProductDB:
    """Manages the products table."""

    def __init__(self, db_path: str | Path = "~/.config/somomi/products.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _write_lock(self) -> Iterator[sqlite3.Connection]:
        """Hold SQLite's write lock for a read-modify-write sequence."""
        conn = self._get_conn()
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            conn.execute("ROLLBACK")
            raise

    def add_product(
        self, product: Product, now: date | datetime | None = None
    ) -> int:
        """Insert a product and return its row ID.

        Raises:
            FreshnessError: The timeline breaks the lifecycle rules.
        """
        tl = validate_timeline(product.timeline, now or date.today())
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO products
               (name, category, location, memo, estimated_life_days,
                opened_at, explicit_expiry_at, consumed_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                product.name,
                product.category,
                product.location,
                product.memo,
                tl.estimated_life_days,
                _format_date(tl.opened_at),
                _format_date(tl.explicit_expiry_at),
                _format_date(tl.consumed_at),
            ),
        )
        logger.debug("Added product %d (%s)", cur.lastrowid, product.name)
        return cur.lastrowid

    def get_product(self, product_id: int) -> Product | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        return _row_to_product(row) if row else None

    def list_active(self) -> list[Product]:
        """Return opened, not yet consumed products."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM products
               WHERE consumed_at IS NULL AND opened_at IS NOT NULL
               ORDER BY opened_at, id"""
        ).fetchall()
        return [_row_to_product(r) for r in rows]

    def list_unopened(self) -> list[Product]:
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM products
               WHERE consumed_at IS NULL AND opened_at IS NULL
               ORDER BY id"""
        ).fetchall()
        return [_row_to_product(r) for r in rows]

    def list_consumed(self) -> list[Product]:
        """Return consumed products, most recently consumed first."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM products
               WHERE consumed_at IS NOT NULL
               ORDER BY consumed_at DESC, id DESC"""
        ).fetchall()
        return [_row_to_product(r) for r in rows]

    def _load_for_update(self, conn: sqlite3.Connection, product_id: int) -> Product:
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        if row is None:
            raise KeyError(product_id)
        return _row_to_product(row)

    def open_product(
        self,
        product_id: int,
        opened_at: date | None = None,
        now: date | datetime | None = None,
    ) -> Product:
        """Start using a product. Defaults to opening it today.

        Raises:
            KeyError: No product with this ID.
            ConsumptionError: The transition is not allowed.
        """
        now = now or date.today()
        with self._write_lock() as conn:
            product = self._load_for_update(conn, product_id)
            timeline = open_product(product.timeline, opened_at, now)
            conn.execute(
                """UPDATE products
                   SET opened_at = ?,
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ?""",
                (_format_date(timeline.opened_at), product_id),
            )
        logger.info("Opened product %d on %s", product_id, timeline.opened_at)
        return replace(product, timeline=timeline)

    def consume_product(
        self,
        product_id: int,
        requested_date: date | None = None,
        now: date | datetime | None = None,
    ) -> Product:
        """Mark a product as fully used.

        The record is read and written under one write lock so two
        concurrent consume requests cannot both succeed.

        Raises:
            KeyError: No product with this ID.
            ConsumptionError: The transition is not allowed.
        """
        now = now or date.today()
        with self._write_lock() as conn:
            product = self._load_for_update(conn, product_id)
            timeline = apply_consumption(product.timeline, requested_date, now)
            conn.execute(
                """UPDATE products
                   SET consumed_at = ?,
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ?""",
                (_format_date(timeline.consumed_at), product_id),
            )
        logger.info("Consumed product %d on %s", product_id, timeline.consumed_at)
        return replace(product, timeline=timeline)

    def set_explicit_expiry(self, product_id: int, expiry: date | None) -> Product:
        """Set or clear (``None``) the manual expiry override."""
        with self._write_lock() as conn:
            product = self._load_for_update(conn, product_id)
            if product.timeline.consumed_at is not None:
                raise AlreadyConsumedError(
                    f"product {product_id} is consumed and can no longer change"
                )
            conn.execute(
                """UPDATE products
                   SET explicit_expiry_at = ?,
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ?""",
                (_format_date(expiry), product_id),
            )
        return replace(
            product, timeline=replace(product.timeline, explicit_expiry_at=expiry)
        )

    def get_expiring(
        self,
        engine: FreshnessEngine,
        now: date | datetime,
        include_warning: bool = False,
    ) -> list[tuple[Product, FreshnessStatus]]:
        """Return active products that need attention, soonest first."""
        results: list[tuple[Product, FreshnessStatus]] = []
        for product in self.list_active():
            status = engine.compute_status(product.timeline, now)
            if is_urgent(status) or (
                include_warning and status.urgency_tier is UrgencyTier.WARNING
            ):
                results.append((product, status))
        results.sort(key=lambda pair: pair[1].days_remaining)
        return results

    def delete_product(self, product_id: int) -> None:
        """Delete a product by ID."""
        conn = self._get_conn()
        conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
