from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from tracker.errors import ValidationError


def iso_today() -> str:
    # UTC, so it lines up with the date prefix of iso_now() timestamps.
    return datetime.now(timezone.utc).date().isoformat()


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def iso_days_ago(days: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=int(days))).replace(microsecond=0).isoformat()


def parse_positive(value, label: str = "Value") -> float:
    """Parse user-entered text as a number > 0 (NaN and blanks rejected)."""
    try:
        v = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number.")
    if v != v or v <= 0:
        raise ValidationError(f"{label} must be greater than 0.")
    return v


def format_money(value: float, currency: str = "PHP", decimals: int = 2) -> str:
    symbol = "₱" if currency == "PHP" else f"{currency} "
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = 0.0
    if v != v or v in (float("inf"), float("-inf")):
        v = 0.0
    return f"{symbol}{v:,.{decimals}f}"


RANGE_DAYS = {"all": None, "7d": 7, "30d": 30}


def within_range(rows, range_: str = "all", now: Optional[datetime] = None) -> list:
    """Keep rows whose ISO `date` falls in the last 7 or 30 days ("all" keeps everything)."""
    if range_ not in RANGE_DAYS:
        raise ValidationError(f"Invalid range. Use one of: {', '.join(RANGE_DAYS)}.")
    days = RANGE_DAYS[range_]
    if days is None:
        return list(rows)
    cutoff = iso_days_ago(days, now=now)
    return [r for r in rows if str(r["date"]) >= cutoff]
