from __future__ import annotations

import sqlite3
from typing import Optional

import streamlit as st

from tracker.config import Settings
from tracker.services import expenses as expense_svc
from tracker.services import inventory as inventory_svc
from tracker.services import products as product_svc
from tracker.services import sales as sales_svc
from tracker.services.metrics import SUMMARY_DAYS, Summary, get_summary_since
from tracker.utils import iso_days_ago


class TrackerState:
    """
    In-memory view of products, recent sales and expenses for one UI session.

    Every mutating method writes through the service layer and then re-reads
    everything with refresh_all(), so the lists never drift from the database.
    """

    def __init__(self, conn: sqlite3.Connection, settings: Settings, *, limit: int = 100):
        self.conn = conn
        self.settings = settings
        self.limit = limit
        self.products: list[dict] = []
        self.sales: list[dict] = []
        self.expenses: list[dict] = []
        self.summary_7d: Optional[Summary] = None
        self.loading = False

    def refresh_all(self) -> None:
        self.loading = True
        try:
            self.products = [dict(r) for r in product_svc.list_products(self.conn)]
            self.sales = [dict(r) for r in sales_svc.list_sales(self.conn, self.limit)]
            self.expenses = [dict(r) for r in expense_svc.list_expenses(self.conn, self.limit)]
        finally:
            self.loading = False
        self.refresh_summary()

    def refresh_summary(self) -> None:
        self.summary_7d = get_summary_since(self.conn, iso_days_ago(SUMMARY_DAYS))

    def low_stock(self, threshold: Optional[int] = None) -> list[dict]:
        limit = self.settings.low_stock_threshold if threshold is None else threshold
        return sorted(
            (p for p in self.products if int(p["qty_on_hand"] or 0) <= limit),
            key=lambda p: int(p["qty_on_hand"] or 0),
        )

    def add_quick_sale(self, sale: sales_svc.SaleInput) -> int:
        sale_id = sales_svc.add_sale(self.conn, sale, allow_negative_stock=self.settings.allow_negative_stock)
        self.refresh_all()
        return sale_id

    def add_quick_expense(self, expense: expense_svc.ExpenseInput) -> int:
        expense_id = expense_svc.add_expense(self.conn, expense)
        self.refresh_all()
        return expense_id

    def save_product(self, product: product_svc.ProductInput) -> Optional[int]:
        product_id = product_svc.upsert_product(self.conn, product)
        self.refresh_all()
        return product_id

    def adjust_stock(self, product_id: int, delta: int) -> None:
        inventory_svc.adjust_inventory(self.conn, product_id, delta)
        self.refresh_all()

    def remove_sale(self, sale_id: int) -> bool:
        done = sales_svc.delete_sale(self.conn, sale_id)
        self.refresh_all()
        return done

    def remove_expense(self, expense_id: int) -> bool:
        done = expense_svc.delete_expense(self.conn, expense_id)
        self.refresh_all()
        return done

    def return_sale(self, sale_id: int) -> Optional[int]:
        new_id = sales_svc.return_sale(self.conn, sale_id)
        self.refresh_all()
        return new_id

    def edit_sale(self, sale_id: int, changes: sales_svc.SaleChanges) -> bool:
        done = sales_svc.update_sale(self.conn, sale_id, changes)
        self.refresh_all()
        return done

    def edit_expense(self, expense_id: int, changes: expense_svc.ExpenseChanges) -> bool:
        done = expense_svc.update_expense(self.conn, expense_id, changes)
        self.refresh_all()
        return done


def get_state(conn: sqlite3.Connection, settings: Settings) -> TrackerState:
    """Return this Streamlit session's TrackerState, creating and loading it on first use."""
    key = f"tracker_state::{settings.db_path}"
    state = st.session_state.get(key)
    if state is None or state.conn is not conn:
        state = TrackerState(conn, settings)
        state.refresh_all()
        st.session_state[key] = state
    return state
