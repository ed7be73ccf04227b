from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from tracker.db import q
from tracker.services.pricing import underpriced_products
from tracker.utils import iso_days_ago

TOP_N = 5
TREND_DAYS = 14
SUMMARY_DAYS = 7


@dataclass
class Summary:
    sales_total: float
    sales_fee: float
    expenses_total: float
    expenses_fee: float
    profit: float


@dataclass
class DayTotals:
    day: str
    sales: float
    expenses: float
    profit: float


@dataclass
class DashboardSummary:
    today: DayTotals
    summary_7d: Summary
    trend: list[DayTotals] = field(default_factory=list)
    best_sellers: list[dict] = field(default_factory=list)
    expense_breakdown: list[dict] = field(default_factory=list)
    underpriced: list[dict] = field(default_factory=list)


def get_summary_since(conn, date_iso: str) -> Summary:
    """
    Sales and expense totals for records dated on or after date_iso.

    Dates are compared as strings, so date_iso must use the same ISO-8601
    layout as the stored dates.
    """
    sales = q(
        conn,
        "SELECT COALESCE(SUM(sale_price * qty), 0) AS total, COALESCE(SUM(fee), 0) AS fee FROM sales WHERE date >= ?",
        (date_iso,),
    )[0]
    expenses = q(
        conn,
        "SELECT COALESCE(SUM(amount), 0) AS total, COALESCE(SUM(fee), 0) AS fee FROM expenses WHERE date >= ?",
        (date_iso,),
    )[0]

    sales_total = float(sales["total"])
    sales_fee = float(sales["fee"])
    expenses_total = float(expenses["total"])
    expenses_fee = float(expenses["fee"])
    return Summary(
        sales_total=sales_total,
        sales_fee=sales_fee,
        expenses_total=expenses_total,
        expenses_fee=expenses_fee,
        profit=sales_total - expenses_total - sales_fee - expenses_fee,
    )


def _daily_rows(conn, start_day: str) -> tuple[dict, dict]:
    # Net sales and expenses keyed by the YYYY-MM-DD prefix of the stored date
    sales = q(
        conn,
        """
        SELECT substr(date, 1, 10) AS day,
               COALESCE(SUM(sale_price * qty - COALESCE(fee, 0)), 0) AS total
        FROM sales
        WHERE date >= ?
        GROUP BY day
        """,
        (start_day,),
    )
    expenses = q(
        conn,
        """
        SELECT substr(date, 1, 10) AS day,
               COALESCE(SUM(amount + COALESCE(fee, 0)), 0) AS total
        FROM expenses
        WHERE date >= ?
        GROUP BY day
        """,
        (start_day,),
    )
    return (
        {r["day"]: float(r["total"]) for r in sales},
        {r["day"]: float(r["total"]) for r in expenses},
    )


def trend(conn, days: int = TREND_DAYS, today: Optional[str] = None) -> list[DayTotals]:
    """Per-day net sales, expenses and profit for the last `days` days, oldest first."""
    end = date.fromisoformat(today) if today else datetime.now(timezone.utc).date()
    keys = [(end - timedelta(days=days - 1 - i)).isoformat() for i in range(days)]
    if not keys:
        return []

    sales_by_day, expenses_by_day = _daily_rows(conn, keys[0])
    out: list[DayTotals] = []
    for d in keys:
        s = sales_by_day.get(d, 0.0)
        e = expenses_by_day.get(d, 0.0)
        out.append(DayTotals(day=d, sales=s, expenses=e, profit=s - e))
    return out


def day_totals(conn, day: Optional[str] = None) -> DayTotals:
    return trend(conn, days=1, today=day)[0]


def best_sellers(conn, since: Optional[str] = None, limit: int = TOP_N) -> list[dict]:
    # Ties keep first-seen order (lowest sale id)
    rows = q(
        conn,
        """
        SELECT
          s.product_id,
          COALESCE(p.name, 'SKU ' || s.product_id) AS name,
          SUM(s.qty) AS qty,
          SUM(s.sale_price * s.qty) AS revenue,
          MIN(s.id) AS first_id
        FROM sales s
        LEFT JOIN products p ON p.id = s.product_id
        WHERE s.date >= ?
        GROUP BY s.product_id
        ORDER BY qty DESC, first_id ASC
        LIMIT ?
        """,
        (since or "", int(limit)),
    )
    return [
        {
            "product_id": int(r["product_id"]),
            "name": str(r["name"]),
            "qty": int(r["qty"]),
            "revenue": float(r["revenue"]),
        }
        for r in rows
    ]


def expense_breakdown(conn, since: Optional[str] = None, limit: int = TOP_N) -> list[dict]:
    rows = q(
        conn,
        """
        SELECT
          COALESCE(NULLIF(TRIM(category), ''), 'Other') AS category,
          SUM(amount + COALESCE(fee, 0)) AS total,
          MIN(id) AS first_id
        FROM expenses
        WHERE date >= ?
        GROUP BY COALESCE(NULLIF(TRIM(category), ''), 'Other')
        ORDER BY total DESC, first_id ASC
        LIMIT ?
        """,
        (since or "", int(limit)),
    )
    return [{"category": str(r["category"]), "total": float(r["total"])} for r in rows]


def dashboard(conn, now: Optional[datetime] = None) -> DashboardSummary:
    now = now or datetime.now(timezone.utc)
    today = now.date().isoformat()
    series = trend(conn, days=TREND_DAYS, today=today)
    return DashboardSummary(
        today=series[-1],
        summary_7d=get_summary_since(conn, iso_days_ago(SUMMARY_DAYS, now=now)),
        trend=series,
        best_sellers=best_sellers(conn),
        expense_breakdown=expense_breakdown(conn),
        underpriced=underpriced_products(conn),
    )
