from __future__ import annotations

import dataclasses

import pytest

from tracker.db import connect, ensure_schema, q, transaction, x
from tracker.errors import InsufficientStock, StorageUnavailable
from tracker.services.expenses import ExpenseChanges, ExpenseInput
from tracker.services.products import ProductInput
from tracker.services.sales import SaleChanges, SaleInput
from tracker.state import TrackerState


def test_transaction_rolls_back_every_write(conn):
    with pytest.raises(RuntimeError):
        with transaction(conn):
            x(conn, "UPDATE inventory SET qty_on_hand = 0 WHERE product_id=1")
            with transaction(conn):
                x(conn, "UPDATE inventory SET qty_on_hand = 0 WHERE product_id=2")
            raise RuntimeError("boom")
    rows = q(conn, "SELECT qty_on_hand FROM inventory WHERE product_id IN (1, 2)")
    assert [r["qty_on_hand"] for r in rows] == [10, 10]
    assert not conn.in_transaction


def test_transaction_commits(conn):
    with transaction(conn):
        x(conn, "UPDATE inventory SET qty_on_hand = 1 WHERE product_id=1")
    conn.rollback()
    assert q(conn, "SELECT qty_on_hand FROM inventory WHERE product_id=1")[0]["qty_on_hand"] == 1


def test_ensure_schema_is_repeatable_on_existing_data(conn):
    ensure_schema(conn)
    ensure_schema(conn)
    assert q(conn, "SELECT COUNT(*) AS n FROM products WHERE active = 1")[0]["n"] == 3
    assert q(conn, "SELECT qty_on_hand FROM inventory WHERE product_id=1")[0]["qty_on_hand"] == 10
    names = {r["name"] for r in q(conn, "SELECT name FROM sqlite_master WHERE type = 'index'")}
    assert {"idx_products_active", "idx_inventory_product"} <= names


def test_connect_to_missing_directory_is_storage_unavailable(tmp_path):
    with pytest.raises(StorageUnavailable):
        connect(tmp_path / "nope" / "tracker.db")


def test_state_refreshes_after_each_mutation(conn, settings):
    state = TrackerState(conn, settings)
    state.refresh_all()
    assert len(state.products) == 3
    assert state.sales == [] and state.expenses == []
    assert state.summary_7d.profit == 0

    sale_id = state.add_quick_sale(SaleInput(product_id=1, qty=2, sale_price=280))
    black = next(p for p in state.products if p["id"] == 1)
    assert black["qty_on_hand"] == 8
    assert state.sales[0]["id"] == sale_id
    assert state.summary_7d.sales_total == 560

    state.edit_sale(sale_id, SaleChanges(qty=1))
    assert next(p for p in state.products if p["id"] == 1)["qty_on_hand"] == 9

    ret_id = state.return_sale(sale_id)
    assert next(p for p in state.products if p["id"] == 1)["qty_on_hand"] == 10
    assert {s["id"] for s in state.sales} == {sale_id, ret_id}

    assert state.remove_sale(ret_id) is True
    assert next(p for p in state.products if p["id"] == 1)["qty_on_hand"] == 9

    exp_id = state.add_quick_expense(ExpenseInput(category="Packaging", amount=80))
    state.edit_expense(exp_id, ExpenseChanges(fee=2))
    assert state.expenses[0]["fee"] == 2
    assert state.remove_expense(exp_id) is True
    assert state.expenses == []


def test_state_stock_edits_and_low_stock(conn, settings):
    state = TrackerState(conn, settings)
    state.refresh_all()
    state.adjust_stock(3, -8)
    assert [p["name"] for p in state.low_stock()] == ["Logo Cap - Navy"]

    state.save_product(ProductInput(id=3, name="Logo Cap - Navy", type="cap", unit_cost=90, price_suggested=180, qty_on_hand=4))
    assert state.low_stock() == []
    assert [p["name"] for p in state.low_stock(5)] == ["Logo Cap - Navy"]


def test_state_applies_negative_stock_policy(conn, settings):
    strict = dataclasses.replace(settings, allow_negative_stock=False)
    state = TrackerState(conn, strict)
    state.refresh_all()
    with pytest.raises(InsufficientStock):
        state.add_quick_sale(SaleInput(product_id=2, qty=11, sale_price=270))
    assert next(p for p in state.products if p["id"] == 2)["qty_on_hand"] == 10
