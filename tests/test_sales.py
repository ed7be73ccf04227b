from __future__ import annotations

import pytest

from tracker.errors import ConstraintViolation, InsufficientStock
from tracker.services.inventory import on_hand
from tracker.services.sales import (
    SaleChanges,
    SaleInput,
    add_sale,
    delete_sale,
    get_sale,
    list_sales,
    return_sale,
    update_sale,
)


def _sale(product_id, qty, price=280.0, **kw):
    return SaleInput(product_id=product_id, qty=qty, sale_price=price, **kw)


def test_add_sale_decrements_and_negative_qty_restores(conn):
    assert on_hand(conn, 1) == 10
    add_sale(conn, _sale(1, 2))
    assert on_hand(conn, 1) == 8
    add_sale(conn, _sale(1, -2))
    assert on_hand(conn, 1) == 10


def test_add_sale_allows_negative_stock_by_default(conn):
    add_sale(conn, _sale(1, 12))
    assert on_hand(conn, 1) == -2


def test_add_sale_refuses_oversell_when_policy_disallows(conn):
    with pytest.raises(InsufficientStock) as exc:
        add_sale(conn, _sale(1, 11), allow_negative_stock=False)
    assert exc.value.on_hand == 10
    assert exc.value.requested == 11
    assert on_hand(conn, 1) == 10
    assert list_sales(conn) == []

    # Exactly draining the shelf is fine
    add_sale(conn, _sale(1, 10), allow_negative_stock=False)
    assert on_hand(conn, 1) == 0


def test_add_sale_unknown_product_is_constraint_violation_and_rolls_back(conn):
    with pytest.raises(ConstraintViolation):
        add_sale(conn, _sale(999, 1))
    assert conn.execute("SELECT COUNT(*) FROM sales").fetchone()[0] == 0
    assert conn.execute("SELECT COUNT(*) FROM inventory WHERE product_id=999").fetchone()[0] == 0


def test_add_then_delete_is_stock_neutral(conn):
    sale_id = add_sale(conn, _sale(2, 3))
    assert on_hand(conn, 2) == 7
    assert delete_sale(conn, sale_id) is True
    assert on_hand(conn, 2) == 10
    assert get_sale(conn, sale_id) is None


def test_return_sale_creates_negated_sale_and_restores_stock(conn):
    sale_id = add_sale(conn, _sale(1, 4, fee=12.5, channel="Shopee", payment_method="GCash", note="gift"))
    assert on_hand(conn, 1) == 6

    ret_id = return_sale(conn, sale_id)
    assert ret_id is not None and ret_id != sale_id
    assert on_hand(conn, 1) == 10

    ret = get_sale(conn, ret_id)
    assert ret["qty"] == -4
    assert ret["fee"] == 0
    assert ret["sale_price"] == 280.0
    assert ret["channel"] == "Shopee"
    assert ret["note"] == "gift • RETURN"


def test_return_sale_without_note_is_tagged(conn):
    sale_id = add_sale(conn, _sale(3, 1))
    ret = get_sale(conn, return_sale(conn, sale_id))
    assert ret["note"] == "RETURN"


def test_missing_sale_operations_are_noops(conn):
    assert return_sale(conn, 12345) is None
    assert update_sale(conn, 12345, SaleChanges(qty=3)) is False
    assert delete_sale(conn, 12345) is False
    assert on_hand(conn, 1) == 10


@pytest.mark.parametrize("old_qty,new_qty", [(2, 5), (5, 2), (3, 3), (2, -1)])
def test_update_sale_moves_stock_by_qty_difference(conn, old_qty, new_qty):
    sale_id = add_sale(conn, _sale(1, old_qty))
    before = on_hand(conn, 1)
    assert update_sale(conn, sale_id, SaleChanges(qty=new_qty)) is True
    assert on_hand(conn, 1) - before == old_qty - new_qty
    assert get_sale(conn, sale_id)["qty"] == new_qty


def test_update_sale_keeps_unspecified_fields(conn):
    sale_id = add_sale(conn, _sale(1, 2, price=250.0, fee=7.0, note="first"))
    update_sale(conn, sale_id, SaleChanges(sale_price=260.0))
    sale = get_sale(conn, sale_id)
    assert sale["qty"] == 2
    assert sale["sale_price"] == 260.0
    assert sale["fee"] == 7.0
    assert sale["note"] == "first"
    assert on_hand(conn, 1) == 8


def test_list_sales_newest_first_with_product_details(conn):
    add_sale(conn, _sale(1, 1, date="2026-10-01T10:00:00+00:00"))
    add_sale(conn, _sale(3, 1, date="2026-10-02T10:00:00+00:00"))
    rows = list_sales(conn)
    assert [r["name"] for r in rows] == ["Logo Cap - Navy", "Oversized Tee - Black"]
    assert len(list_sales(conn, limit=1)) == 1


def test_update_sale_empty_note_clears_it(conn):
    sale_id = add_sale(conn, _sale(1, 1, note="wrong buyer"))
    assert update_sale(conn, sale_id, SaleChanges(note="")) is True
    assert get_sale(conn, sale_id)["note"] == ""


def _lock(conn, name, event, table):
    conn.execute(f"CREATE TRIGGER {name} BEFORE {event} ON {table} BEGIN SELECT RAISE(ABORT, 'locked'); END;")
    conn.commit()


def test_delete_sale_rolls_back_stock_when_delete_fails(conn):
    sale_id = add_sale(conn, _sale(1, 2))
    _lock(conn, "block_sale_delete", "DELETE", "sales")
    with pytest.raises(ConstraintViolation):
        delete_sale(conn, sale_id)
    assert on_hand(conn, 1) == 8
    assert get_sale(conn, sale_id) is not None
    assert not conn.in_transaction


def test_update_sale_rolls_back_stock_when_update_fails(conn):
    sale_id = add_sale(conn, _sale(1, 2))
    _lock(conn, "block_sale_update", "UPDATE", "sales")
    with pytest.raises(ConstraintViolation):
        update_sale(conn, sale_id, SaleChanges(qty=5))
    assert on_hand(conn, 1) == 8
    assert get_sale(conn, sale_id)["qty"] == 2


def test_return_sale_rolls_back_return_row_when_stock_write_fails(conn):
    sale_id = add_sale(conn, _sale(1, 2))
    _lock(conn, "block_stock_update", "UPDATE", "inventory")
    with pytest.raises(ConstraintViolation):
        return_sale(conn, sale_id)
    assert [int(r["id"]) for r in list_sales(conn)] == [sale_id]
    assert on_hand(conn, 1) == 8
