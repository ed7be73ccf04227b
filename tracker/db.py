from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import streamlit as st

from tracker.errors import ConstraintViolation, StorageUnavailable
from tracker.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


def connect(db_path: Path | str) -> sqlite3.Connection:
    try:
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.OperationalError as e:
        logger.error("Cannot open database %s: %s", db_path, e)
        raise StorageUnavailable(f"Cannot open database at {db_path}: {e}") from e
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Run a group of writes as one SQLite transaction.

    Commits when the block exits normally, rolls back on any exception.
    Nested use joins the outer transaction, so service functions can call
    each other freely.
    """
    if conn.in_transaction:
        yield conn
        return

    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    # Inside transaction() the outer block owns commit/rollback.
    owns_tx = not conn.in_transaction
    try:
        cur = conn.execute(sql, tuple(params))
    except sqlite3.IntegrityError as e:
        if owns_tx:
            conn.rollback()
        logger.warning("Constraint violation: %s", e)
        raise ConstraintViolation(str(e)) from e
    if owns_tx:
        conn.commit()
    last = cur.lastrowid
    cur.close()
    return int(last or 0)
