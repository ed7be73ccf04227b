from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pandas as pd

from tracker.utils import RANGE_DAYS

# Column order is read back by spreadsheets and older exports; keep it fixed.
EXPORT_COLUMNS = ["type", "id", "product_id", "qty", "price", "channel", "payment_method", "fee", "date", "note"]
EXPORT_KINDS = ("both", "sales", "expenses")
EXPORT_RANGES = RANGE_DAYS
EXPORT_FILE_NAME = "tracker-export.csv"


def _fmt(v) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _in_range(df: pd.DataFrame, cutoff: Optional[datetime]) -> pd.DataFrame:
    if cutoff is None or df.empty:
        return df
    ts = pd.to_datetime(df["date"], utc=True, format="ISO8601", errors="coerce")
    return df[ts >= pd.Timestamp(cutoff)]


def sale_rows(sales: Iterable) -> pd.DataFrame:
    rows = [
        {
            "type": "sale",
            "id": _fmt(s["id"]),
            "product_id": _fmt(s["product_id"]),
            "qty": _fmt(s["qty"]),
            "price": _fmt(s["sale_price"]),
            "channel": _fmt(s["channel"]),
            "payment_method": _fmt(s["payment_method"]),
            "fee": _fmt(s["fee"] if s["fee"] is not None else 0),
            "date": _fmt(s["date"]),
            "note": _fmt(s["note"]),
        }
        for s in sales
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=str)


def expense_rows(expenses: Iterable) -> pd.DataFrame:
    rows = [
        {
            "type": "expense",
            "id": _fmt(e["id"]),
            "product_id": "",
            "qty": "",
            "price": "",
            "channel": "",
            "payment_method": _fmt(e["payment_method"]),
            "fee": _fmt(e["fee"] if e["fee"] is not None else 0),
            "date": _fmt(e["date"]),
            "note": f"{e['category']}: {_fmt(e['amount'])}",
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=str)


def export_csv(
    sales: Iterable,
    expenses: Iterable,
    *,
    kind: str = "both",
    range_: str = "all",
    now: Optional[datetime] = None,
) -> str:
    """
    Serialize sales and expenses into one CSV (sales first, then expenses).

    kind is one of "both", "sales", "expenses"; range_ is "all", "7d" or "30d".
    """
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Invalid export kind. Use one of: {', '.join(EXPORT_KINDS)}.")
    if range_ not in EXPORT_RANGES:
        raise ValueError(f"Invalid export range. Use one of: {', '.join(EXPORT_RANGES)}.")

    days = EXPORT_RANGES[range_]
    cutoff = None
    if days is not None:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - timedelta(days=days)

    frames = []
    if kind != "expenses":
        frames.append(_in_range(sale_rows(sales), cutoff))
    if kind != "sales":
        frames.append(_in_range(expense_rows(expenses), cutoff))

    df = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame(columns=EXPORT_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n")
