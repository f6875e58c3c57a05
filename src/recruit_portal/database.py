"""SQLite-backed document store — one JSON document per row, one table per collection."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from recruit_portal.errors import WriteError

log = logging.getLogger(__name__)

DB_PATH = Path(os.getenv("PORTAL_DB_PATH", "recruit_portal.db"))

COLLECTIONS = (
    "jobs",
    "users",
    "candidates",
    "complaints",
    "partner_requirements",
    "demo_requests",
    "store_supervisors",
)

# Default ordering of fetch-all results, newest first
_ORDER_BY = {
    "jobs": "postedDate",
    "candidates": "appliedDate",
    "complaints": "submittedDate",
    "partner_requirements": "postedDate",
    "demo_requests": "requestDate",
}

SETTINGS_DOC = "appSettings"

_listeners: list[Callable[[str], None]] = []


def get_conn() -> sqlite3.Connection:
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db() -> None:
    """Create collection tables if they don't exist."""
    conn = get_conn()
    for name in COLLECTIONS:
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {name} (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            )
        """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT
        )
    """)
    conn.commit()
    conn.close()


def _check(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")


# ── Change notification ───────────────────────────────────────────────────

def add_change_listener(fn: Callable[[str], None]) -> None:
    if fn not in _listeners:
        _listeners.append(fn)


def remove_change_listener(fn: Callable[[str], None]) -> None:
    if fn in _listeners:
        _listeners.remove(fn)


def _notify(collection: str) -> None:
    for fn in list(_listeners):
        try:
            fn(collection)
        except Exception:
            log.exception("Change listener failed for %s", collection)


# ── Documents ─────────────────────────────────────────────────────────────

@contextmanager
def _writing(action: str, collection: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        log.error("Failed to %s %s: %s", action, collection, e)
        raise WriteError(action, collection, str(e)) from e


def _row_to_doc(row: sqlite3.Row) -> dict:
    d = json.loads(row["data"])
    d["id"] = row["id"]
    return d


def fetch_all(collection: str) -> list[dict]:
    _check(collection)
    conn = get_conn()
    rows = conn.execute(f"SELECT * FROM {collection} ORDER BY created_at").fetchall()
    conn.close()
    docs = [_row_to_doc(r) for r in rows]
    order_key = _ORDER_BY.get(collection)
    if order_key:
        docs.sort(key=lambda d: d.get(order_key) or "", reverse=True)
    return docs


def get_doc(collection: str, doc_id: str) -> dict | None:
    _check(collection)
    conn = get_conn()
    row = conn.execute(f"SELECT * FROM {collection} WHERE id = ?", (doc_id,)).fetchone()
    conn.close()
    return _row_to_doc(row) if row else None


def find_docs(collection: str, **where: Any) -> list[dict]:
    """Return documents whose top-level fields equal every given value."""
    return [d for d in fetch_all(collection) if all(d.get(k) == v for k, v in where.items())]


def insert_doc(collection: str, doc: dict) -> dict:
    _check(collection)
    doc = dict(doc)
    doc_id = doc.pop("id", None) or uuid.uuid4().hex[:8]
    now = datetime.now().isoformat()
    with _writing("create", collection):
        conn = get_conn()
        conn.execute(
            f"INSERT INTO {collection} (id, data, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (doc_id, json.dumps(doc), now, now),
        )
        conn.commit()
        conn.close()
    _notify(collection)
    return {"id": doc_id, **doc}


def update_doc(collection: str, doc_id: str, updates: dict) -> bool:
    """Merge ``updates`` into an existing document."""
    _check(collection)
    with _writing("update", collection):
        conn = get_conn()
        row = conn.execute(f"SELECT data FROM {collection} WHERE id = ?", (doc_id,)).fetchone()
        if not row:
            conn.close()
            return False
        data = json.loads(row["data"])
        data.update({k: v for k, v in updates.items() if k != "id"})
        conn.execute(
            f"UPDATE {collection} SET data = ?, updated_at = ? WHERE id = ?",
            (json.dumps(data), datetime.now().isoformat(), doc_id),
        )
        conn.commit()
        conn.close()
    _notify(collection)
    return True


def delete_doc(collection: str, doc_id: str) -> bool:
    _check(collection)
    with _writing("delete", collection):
        conn = get_conn()
        cur = conn.execute(f"DELETE FROM {collection} WHERE id = ?", (doc_id,))
        conn.commit()
        conn.close()
    if cur.rowcount > 0:
        _notify(collection)
        return True
    return False


# ── Users ─────────────────────────────────────────────────────────────────

def get_user_by_id(user_id: str) -> dict | None:
    return get_doc("users", user_id)


def get_user_by_email(email: str) -> dict | None:
    email = email.strip().lower()
    for u in fetch_all("users"):
        if (u.get("email") or "").lower() == email:
            return u
    return None


def get_user_by_phone(phone: str) -> dict | None:
    digits = "".join(ch for ch in phone if ch.isdigit())
    if not digits:
        return None
    for u in fetch_all("users"):
        if "".join(ch for ch in (u.get("phone") or "") if ch.isdigit()) == digits:
            return u
    return None


# ── Settings document ─────────────────────────────────────────────────────

def get_settings() -> dict | None:
    conn = get_conn()
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (SETTINGS_DOC,)).fetchone()
    conn.close()
    return json.loads(row["value"]) if row else None


def put_settings(update: dict) -> dict:
    """Merge ``update`` into the settings document, creating it if needed."""
    current = get_settings() or {}
    current.update(update)
    with _writing("update", "settings"):
        conn = get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (SETTINGS_DOC, json.dumps(current)),
        )
        conn.commit()
        conn.close()
    _notify("settings")
    return current
