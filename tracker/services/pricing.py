from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tracker.db import q

CHANNELS = ["Walk-in", "Shopee", "Lazada", "Facebook", "Instagram"]
PAYMENT_METHODS = ["Cash", "GCash", "Card"]

# Marketplace commission and payment processing, as a fraction of subtotal
CHANNEL_FEE_RATES = {
    "Walk-in": 0.0,
    "Shopee": 0.11,
    "Lazada": 0.11,
    "Facebook": 0.03,
    "Instagram": 0.03,
}
PAYMENT_FEE_RATES = {
    "Cash": 0.0,
    "GCash": 0.025,
    "Card": 0.03,
}

LOW_MARGIN_RATIO = 0.10

UNDER_COST = "under_cost"
LOW_MARGIN = "low_margin"


@dataclass
class MarginInfo:
    unit_cost: float
    revenue: float
    cost: float
    net: float
    margin: float
    warning: Optional[str]


def suggested_fee(price: float, qty: int, channel: Optional[str], payment_method: Optional[str]) -> float:
    rate = CHANNEL_FEE_RATES.get(channel or "", 0.0) + PAYMENT_FEE_RATES.get(payment_method or "", 0.0)
    computed = float(price) * int(qty) * rate
    return round(computed, 2) if computed > 0 else 0.0


def margin_info(unit_cost: float, qty: int, price: float, fee: float = 0.0) -> MarginInfo:
    """
    Net margin of one sale line: revenue - fee - unit cost * qty.

    warning is UNDER_COST when the line loses money and LOW_MARGIN when the
    margin is below 10% of cost.
    """
    unit_cost = float(unit_cost or 0)
    revenue = float(price or 0) * int(qty)
    cost = unit_cost * int(qty)
    net = revenue - float(fee or 0)
    margin = net - cost

    warning = None
    if margin < 0:
        warning = UNDER_COST
    elif margin < cost * LOW_MARGIN_RATIO:
        warning = LOW_MARGIN
    return MarginInfo(unit_cost=unit_cost, revenue=revenue, cost=cost, net=net, margin=margin, warning=warning)


def underpriced_products(conn) -> list[dict]:
    out: list[dict] = []
    rows = q(conn, "SELECT id, name, unit_cost, price_suggested FROM products WHERE active = 1 ORDER BY name ASC")
    for r in rows:
        info = margin_info(float(r["unit_cost"]), 1, float(r["price_suggested"]))
        if info.warning is not None:
            out.append(
                {
                    "product_id": int(r["id"]),
                    "name": str(r["name"]),
                    "unit_cost": float(r["unit_cost"]),
                    "price_suggested": float(r["price_suggested"]),
                }
            )
    return out
