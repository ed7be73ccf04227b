from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tracker.db import q, transaction, x
from tracker.errors import InsufficientStock
from tracker.services.inventory import adjust_inventory, on_hand
from tracker.utils import iso_now

logger = logging.getLogger(__name__)

RETURN_TAG = "RETURN"


@dataclass
class SaleInput:
    product_id: int
    qty: int
    sale_price: float
    date: Optional[str] = None  # defaults to now (UTC ISO)
    channel: Optional[str] = None
    payment_method: Optional[str] = None
    fee: float = 0.0
    note: Optional[str] = None


@dataclass
class SaleChanges:
    """Partial update for a sale: None means keep the stored value."""

    qty: Optional[int] = None
    sale_price: Optional[float] = None
    fee: Optional[float] = None
    note: Optional[str] = None


def _normalize_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def get_sale(conn, sale_id: int):
    rows = q(conn, "SELECT * FROM sales WHERE id=?", (int(sale_id),))
    return rows[0] if rows else None


def list_sales(conn, limit: int = 100):
    return q(
        conn,
        """
        SELECT s.*, p.name, p.type, p.color, p.size
        FROM sales s
        JOIN products p ON p.id = s.product_id
        ORDER BY s.date DESC, s.id DESC
        LIMIT ?
        """,
        (int(limit),),
    )


def add_sale(conn, sale: SaleInput, *, allow_negative_stock: bool = True) -> int:
    """
    Record a sale and take its qty out of stock.

    A negative qty (a return) puts stock back. With allow_negative_stock=False
    a sale that would leave the product below zero raises InsufficientStock.
    """
    qty = int(sale.qty)
    with transaction(conn):
        if not allow_negative_stock and qty > 0:
            current = on_hand(conn, sale.product_id)
            if current - qty < 0:
                raise InsufficientStock(int(sale.product_id), current, qty)

        sale_id = x(
            conn,
            """
            INSERT INTO sales (product_id, qty, sale_price, channel, payment_method, fee, date, note)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                int(sale.product_id),
                qty,
                float(sale.sale_price),
                _normalize_text(sale.channel),
                _normalize_text(sale.payment_method),
                float(sale.fee or 0),
                sale.date or iso_now(),
                _normalize_text(sale.note),
            ),
        )
        adjust_inventory(conn, sale.product_id, -qty)

    logger.info("Sale recorded", extra={"extra": {"sale_id": sale_id, "product_id": int(sale.product_id), "qty": qty}})
    return sale_id


def return_sale(conn, sale_id: int) -> Optional[int]:
    """Book a return as a new sale with the opposite qty. Returns its id, or None if the sale is missing."""
    with transaction(conn):
        sale = get_sale(conn, sale_id)
        if sale is None:
            logger.info("Return skipped; sale not found", extra={"extra": {"sale_id": int(sale_id)}})
            return None

        note = f"{sale['note']} • {RETURN_TAG}" if sale["note"] else RETURN_TAG
        return add_sale(
            conn,
            SaleInput(
                product_id=int(sale["product_id"]),
                qty=-int(sale["qty"]),
                sale_price=float(sale["sale_price"]),
                channel=sale["channel"],
                payment_method=sale["payment_method"],
                fee=0.0,
                date=iso_now(),
                note=note,
            ),
        )


def update_sale(conn, sale_id: int, changes: SaleChanges) -> bool:
    """
    Apply a partial edit to a sale.

    Stock moves by old_qty - new_qty so inventory keeps matching the net
    quantity sold. Returns False when the sale does not exist.
    """
    with transaction(conn):
        sale = get_sale(conn, sale_id)
        if sale is None:
            logger.info("Update skipped; sale not found", extra={"extra": {"sale_id": int(sale_id)}})
            return False

        new_qty = int(changes.qty) if changes.qty is not None else int(sale["qty"])
        new_price = float(changes.sale_price) if changes.sale_price is not None else float(sale["sale_price"])
        new_fee = float(changes.fee) if changes.fee is not None else float(sale["fee"] or 0)
        new_note = changes.note if changes.note is not None else sale["note"]

        diff = int(sale["qty"]) - new_qty
        if diff != 0:
            adjust_inventory(conn, int(sale["product_id"]), diff)

        x(
            conn,
            "UPDATE sales SET qty=?, sale_price=?, fee=?, note=? WHERE id=?",
            (new_qty, new_price, new_fee, new_note, int(sale_id)),
        )

    logger.info("Sale updated", extra={"extra": {"sale_id": int(sale_id), "stock_delta": diff}})
    return True


def delete_sale(conn, sale_id: int) -> bool:
    """Delete a sale and give its qty back to stock (an implicit full return)."""
    with transaction(conn):
        sale = get_sale(conn, sale_id)
        if sale is None:
            logger.info("Delete skipped; sale not found", extra={"extra": {"sale_id": int(sale_id)}})
            return False

        adjust_inventory(conn, int(sale["product_id"]), int(sale["qty"]))
        x(conn, "DELETE FROM sales WHERE id=?", (int(sale_id),))

    logger.info("Sale deleted", extra={"extra": {"sale_id": int(sale_id)}})
    return True
