from __future__ import annotations

import logging

from tracker.db import q, x
from tracker.errors import ValidationError

logger = logging.getLogger(__name__)


def on_hand(conn, product_id: int) -> int:
    rows = q(conn, "SELECT qty_on_hand FROM inventory WHERE product_id=?", (int(product_id),))
    return int(rows[0]["qty_on_hand"]) if rows else 0


def adjust_inventory(conn, product_id: int, delta: int) -> None:
    """
    Add delta to a product's stock (negative delta removes stock).

    Creates the inventory row from a 0 baseline when it is missing.
    No floor or ceiling is applied here; sale policy lives in sales.add_sale.
    """
    x(
        conn,
        """
        INSERT INTO inventory (product_id, qty_on_hand)
        VALUES (?, ?)
        ON CONFLICT(product_id) DO UPDATE SET qty_on_hand = qty_on_hand + excluded.qty_on_hand
        """,
        (int(product_id), int(delta)),
    )
    logger.info("Inventory adjusted", extra={"extra": {"product_id": int(product_id), "delta": int(delta)}})


def set_inventory(conn, product_id: int, qty_on_hand: int) -> None:
    """Absolute set (stocktake), as opposed to adjust_inventory's delta."""
    x(
        conn,
        """
        INSERT INTO inventory (product_id, qty_on_hand)
        VALUES (?, ?)
        ON CONFLICT(product_id) DO UPDATE SET qty_on_hand = excluded.qty_on_hand
        """,
        (int(product_id), int(qty_on_hand)),
    )


def restock(conn, product_id: int, qty: int) -> None:
    if int(qty) <= 0:
        raise ValidationError("Restock quantity must be > 0.")
    adjust_inventory(conn, product_id, int(qty))


def inventory_summary(conn):
    return q(
        conn,
        """
        SELECT
          p.name,
          p.type,
          p.color,
          p.size,
          COALESCE(i.qty_on_hand, 0) AS qty_on_hand,
          ROUND(p.unit_cost, 2) AS unit_cost,
          ROUND(COALESCE(i.qty_on_hand, 0) * p.unit_cost, 2) AS stock_value
        FROM products p
        LEFT JOIN inventory i ON i.product_id = p.id
        WHERE p.active = 1
        ORDER BY p.name ASC
        """,
    )
