from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tracker.db import q, transaction, x
from tracker.errors import ValidationError
from tracker.services.inventory import set_inventory

logger = logging.getLogger(__name__)

PRODUCT_TYPES = ("clothing", "cap")


@dataclass
class ProductInput:
    name: str
    type: str
    unit_cost: float
    price_suggested: float
    color: Optional[str] = None
    size: Optional[str] = None
    active: int = 1
    qty_on_hand: int = 0
    id: Optional[int] = None


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _validate(p: ProductInput) -> None:
    if not str(p.name or "").strip():
        raise ValidationError("Product name is required.")
    if p.type not in PRODUCT_TYPES:
        raise ValidationError(f"Invalid product type. Use one of: {', '.join(PRODUCT_TYPES)}.")
    if float(p.unit_cost) < 0 or float(p.price_suggested) < 0:
        raise ValidationError("Cost and price must be >= 0.")


def list_products(conn):
    return q(
        conn,
        """
        SELECT p.*, COALESCE(i.qty_on_hand, 0) AS qty_on_hand
        FROM products p
        LEFT JOIN inventory i ON i.product_id = p.id
        WHERE p.active = 1
        ORDER BY p.name ASC
        """,
    )


def get_product(conn, product_id: int):
    rows = q(
        conn,
        """
        SELECT p.*, COALESCE(i.qty_on_hand, 0) AS qty_on_hand
        FROM products p
        LEFT JOIN inventory i ON i.product_id = p.id
        WHERE p.id=?
        """,
        (int(product_id),),
    )
    return rows[0] if rows else None


def upsert_product(conn, product: ProductInput) -> Optional[int]:
    """
    Create or edit a product together with its stock level.

    Editing sets qty_on_hand to exactly the given value (a stocktake), unlike
    inventory.adjust_inventory which applies a delta. Editing an id that does
    not exist is a no-op and returns None.
    """
    _validate(product)
    if product.id and not q(conn, "SELECT id FROM products WHERE id=?", (int(product.id),)):
        logger.info("Product not found; nothing updated", extra={"extra": {"product_id": int(product.id)}})
        return None

    params = (
        str(product.name).strip(),
        product.type,
        _blank_to_none(product.color),
        _blank_to_none(product.size),
        float(product.unit_cost),
        float(product.price_suggested),
        int(product.active),
    )

    with transaction(conn):
        if product.id:
            x(
                conn,
                """
                UPDATE products
                SET name=?, type=?, color=?, size=?, unit_cost=?, price_suggested=?, active=?
                WHERE id=?
                """,
                params + (int(product.id),),
            )
            set_inventory(conn, int(product.id), int(product.qty_on_hand))
            logger.info("Product updated", extra={"extra": {"product_id": int(product.id)}})
            return int(product.id)

        new_id = x(
            conn,
            """
            INSERT INTO products (name, type, color, size, unit_cost, price_suggested, active)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            params,
        )
        x(conn, "INSERT INTO inventory (product_id, qty_on_hand) VALUES (?, ?)", (new_id, int(product.qty_on_hand)))

    logger.info("Product created", extra={"extra": {"product_id": new_id, "qty_on_hand": int(product.qty_on_hand)}})
    return new_id
