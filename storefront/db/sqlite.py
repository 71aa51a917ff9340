from __future__ import annotations

import json
import os
import sqlite3
from typing import Any, Optional

from storefront.config import settings


def _connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    path = db_path or settings.db_path
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[str] = None) -> None:
    conn = _connect(db_path)
    try:
        with open(os.path.join(os.path.dirname(__file__), "schema.sql"), "r", encoding="utf-8") as f:
            conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()


def slot_get(key: str, db_path: Optional[str] = None) -> Optional[Any]:
    """Decoded JSON value of a slot, or None when the slot is empty."""
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT value FROM slots WHERE key=?", (key,)).fetchone()
    finally:
        conn.close()
    if not row:
        return None
    return json.loads(row["value"])


def slot_put(key: str, value: Any, db_path: Optional[str] = None) -> None:
    # одна транзакция: второй читатель видит либо старое значение, либо новое
    payload = json.dumps(value, ensure_ascii=False)
    conn = _connect(db_path)
    try:
        conn.execute("BEGIN")
        conn.execute(
            "INSERT INTO slots(key, value) VALUES(?,?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, payload),
        )
        conn.commit()
    except Exception:
        if conn.in_transaction:
            conn.rollback()
        raise
    finally:
        conn.close()


def slot_delete(key: str, db_path: Optional[str] = None) -> None:
    conn = _connect(db_path)
    try:
        conn.execute("BEGIN")
        conn.execute("DELETE FROM slots WHERE key=?", (key,))
        conn.commit()
    except Exception:
        if conn.in_transaction:
            conn.rollback()
        raise
    finally:
        conn.close()
