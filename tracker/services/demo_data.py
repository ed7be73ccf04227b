from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone

from tracker.db import ensure_schema, q, transaction, x
from tracker.services.expenses import EXPENSE_CATEGORIES, ExpenseInput, add_expense
from tracker.services.inventory import restock
from tracker.services.pricing import CHANNELS, PAYMENT_METHODS, suggested_fee
from tracker.services.sales import SaleInput, add_sale

logger = logging.getLogger(__name__)

INITIAL_STOCK = 10

# (name, type, color, size, unit_cost, price_suggested)
DEFAULT_PRODUCTS = [
    ("Oversized Tee - Black", "clothing", "Black", "L", 180.0, 280.0),
    ("Oversized Tee - White", "clothing", "White", "L", 170.0, 270.0),
    ("Logo Cap - Navy", "cap", "Navy", None, 90.0, 180.0),
]


def seed_products(conn) -> int:
    """Insert the starter catalog when there are no products yet. Returns rows inserted."""
    existing = q(conn, "SELECT COUNT(*) AS n FROM products")[0]
    if int(existing["n"]) > 0:
        return 0

    with transaction(conn):
        for name, ptype, color, size, cost, price in DEFAULT_PRODUCTS:
            product_id = x(
                conn,
                """
                INSERT INTO products (name, type, color, size, unit_cost, price_suggested, active)
                VALUES (?, ?, ?, ?, ?, ?, 1)
                """,
                (name, ptype, color, size, cost, price),
            )
            x(conn, "INSERT INTO inventory (product_id, qty_on_hand) VALUES (?, ?)", (product_id, INITIAL_STOCK))

    logger.info("Seeded starter products", extra={"extra": {"count": len(DEFAULT_PRODUCTS)}})
    return len(DEFAULT_PRODUCTS)


def migrate(conn) -> None:
    ensure_schema(conn)
    seed_products(conn)


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    with transaction(conn):
        for t in ["sales", "inventory", "expenses", "products"]:
            conn.execute(f"DELETE FROM {t};")
    logger.info("All data wiped")


def load_demo_data(conn, *, seed: int = 7, days: int = 14) -> None:
    random.seed(seed)
    migrate(conn)

    products = q(conn, "SELECT * FROM products WHERE active = 1 ORDER BY id")
    now = datetime.now(timezone.utc).replace(microsecond=0)

    with transaction(conn):
        for d in range(days):
            day = now - timedelta(days=days - 1 - d)

            for _ in range(random.randint(0, 3)):
                p = random.choice(products)
                qty = random.choice([1, 1, 2, 3])
                channel = random.choice(CHANNELS)
                payment = random.choice(PAYMENT_METHODS)
                price = float(p["price_suggested"])
                add_sale(
                    conn,
                    SaleInput(
                        product_id=int(p["id"]),
                        qty=qty,
                        sale_price=price,
                        channel=channel,
                        payment_method=payment,
                        fee=suggested_fee(price, qty, channel, payment),
                        date=day.isoformat(),
                    ),
                )

            if random.random() < 0.4:
                add_expense(
                    conn,
                    ExpenseInput(
                        category=random.choice(EXPENSE_CATEGORIES),
                        amount=float(random.choice([150, 250, 400, 500, 1200])),
                        payment_method=random.choice(PAYMENT_METHODS),
                        date=day.isoformat(),
                        supplier="Demo Supplier",
                    ),
                )

        # Restock after the demo sales so stock stays positive
        for p in products:
            restock(conn, int(p["id"]), INITIAL_STOCK)

    logger.info("Demo data loaded", extra={"extra": {"seed": seed, "days": days}})
