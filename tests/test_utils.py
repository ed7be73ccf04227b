from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tracker.errors import ValidationError
from tracker.utils import format_money, iso_days_ago, iso_now, iso_today, parse_positive, within_range


@pytest.mark.parametrize("raw,expected", [("500", 500.0), (" 12.5 ", 12.5), (3, 3.0)])
def test_parse_positive_accepts(raw, expected):
    assert parse_positive(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "nan", "0", "-4", None])
def test_parse_positive_rejects(raw):
    with pytest.raises(ValidationError):
        parse_positive(raw, "Amount")


def test_format_money():
    assert format_money(1234.5) == "₱1,234.50"
    assert format_money(-500) == "₱-500.00"
    assert format_money(float("nan")) == "₱0.00"
    assert format_money(99.4, decimals=0) == "₱99"


def test_iso_helpers_share_a_date_prefix():
    assert iso_now().startswith(iso_today())
    now = datetime(2026, 10, 19, 12, 30, 15, 999, tzinfo=timezone.utc)
    assert iso_days_ago(7, now=now) == "2026-10-12T12:30:15+00:00"


def test_within_range_keeps_recent_rows():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    rows = [
        {"id": 1, "date": "2026-10-18T09:00:00+00:00"},
        {"id": 2, "date": "2026-10-01T09:00:00+00:00"},
        {"id": 3, "date": "2026-06-01T09:00:00+00:00"},
    ]
    assert [r["id"] for r in within_range(rows, "all", now=now)] == [1, 2, 3]
    assert [r["id"] for r in within_range(rows, "7d", now=now)] == [1]
    assert [r["id"] for r in within_range(rows, "30d", now=now)] == [1, 2]


def test_within_range_rejects_unknown_range():
    with pytest.raises(ValidationError):
        within_range([], "90d")
