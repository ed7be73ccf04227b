from __future__ import annotations

import pytest

from tracker.config import Settings
from tracker.db import connect
from tracker.services.demo_data import migrate


@pytest.fixture
def conn(tmp_path):
    c = connect(tmp_path / "tracker.db")
    migrate(c)
    yield c
    c.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path, db_path=tmp_path / "tracker.db")


@pytest.fixture
def product_ids(conn):
    rows = conn.execute("SELECT id, name FROM products ORDER BY id").fetchall()
    return {r["name"]: int(r["id"]) for r in rows}
