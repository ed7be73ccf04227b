from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tracker.db import q, transaction, x
from tracker.errors import ValidationError
from tracker.utils import iso_now

logger = logging.getLogger(__name__)

EXPENSE_CATEGORIES = [
    "Fabric",
    "Screen printing / DTF",
    "Embroidery",
    "Packaging",
    "Shopee/Lazada fee",
    "GCash fee",
    "Delivery/rider",
    "Stall rent",
    "Electricity",
    "Ads",
    "Buttons/tags/labels",
]


@dataclass
class ExpenseInput:
    category: str
    amount: float
    date: Optional[str] = None  # defaults to now (UTC ISO)
    payment_method: Optional[str] = None
    fee: float = 0.0
    supplier: Optional[str] = None
    note: Optional[str] = None


@dataclass
class ExpenseChanges:
    """Partial update for an expense: None means keep the stored value."""

    amount: Optional[float] = None
    fee: Optional[float] = None
    note: Optional[str] = None


def _normalize_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def get_expense(conn, expense_id: int):
    rows = q(conn, "SELECT * FROM expenses WHERE id=?", (int(expense_id),))
    return rows[0] if rows else None


def list_expenses(conn, limit: int = 100):
    return q(conn, "SELECT * FROM expenses ORDER BY date DESC, id DESC LIMIT ?", (int(limit),))


def add_expense(conn, expense: ExpenseInput) -> int:
    category = _normalize_text(expense.category)
    if category is None:
        raise ValidationError("Expense category is required.")

    expense_id = x(
        conn,
        """
        INSERT INTO expenses (category, amount, payment_method, fee, date, supplier, note)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            category,
            float(expense.amount),
            _normalize_text(expense.payment_method),
            float(expense.fee or 0),
            expense.date or iso_now(),
            _normalize_text(expense.supplier),
            _normalize_text(expense.note),
        ),
    )
    logger.info("Expense recorded", extra={"extra": {"expense_id": expense_id, "category": category}})
    return expense_id


def update_expense(conn, expense_id: int, changes: ExpenseChanges) -> bool:
    with transaction(conn):
        exp = get_expense(conn, expense_id)
        if exp is None:
            logger.info("Update skipped; expense not found", extra={"extra": {"expense_id": int(expense_id)}})
            return False

        new_amount = float(changes.amount) if changes.amount is not None else float(exp["amount"])
        new_fee = float(changes.fee) if changes.fee is not None else float(exp["fee"] or 0)
        new_note = changes.note if changes.note is not None else exp["note"]
        x(
            conn,
            "UPDATE expenses SET amount=?, fee=?, note=? WHERE id=?",
            (new_amount, new_fee, new_note, int(expense_id)),
        )

    logger.info("Expense updated", extra={"extra": {"expense_id": int(expense_id)}})
    return True


def delete_expense(conn, expense_id: int) -> bool:
    if get_expense(conn, expense_id) is None:
        logger.info("Delete skipped; expense not found", extra={"extra": {"expense_id": int(expense_id)}})
        return False
    x(conn, "DELETE FROM expenses WHERE id=?", (int(expense_id),))
    logger.info("Expense deleted", extra={"extra": {"expense_id": int(expense_id)}})
    return True
