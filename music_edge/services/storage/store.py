"""SQLite-backed key-value store used by the storage endpoint."""
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Iterable, Optional


_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS kv_store ("
    "key TEXT PRIMARY KEY, value TEXT, updated_at TEXT DEFAULT CURRENT_TIMESTAMP)"
)
_UPSERT = (
    "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, datetime('now')) "
    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at"
)


def coerce_value(value: Any) -> str:
    """Render a JSON value the way it is stored: always as text."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


class KeyValueStore:
    """Blocking key-value access; every batch runs in a single transaction.

    A connection is opened per call so the store can be used from worker
    threads, which rules out SQLite's per-connection ``:memory:`` databases.
    """

    def __init__(self, db_path: str) -> None:
        if not db_path or db_path == ":memory:" or db_path.startswith("file::memory:"):
            raise ValueError("storage_path must point to a database file")
        self.db_path = db_path
        self._logger = logging.getLogger(self.__class__.__name__)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute(_CREATE_TABLE)
        self._logger.info("Key-value store ready at '%s'", self.db_path)

    def get(self, keys: Optional[list[str]] = None) -> dict[str, Optional[str]]:
        """Return the requested keys (``None`` for missing ones) or every stored pair."""

        with closing(self._connect()) as conn:
            if keys:
                placeholders = ",".join("?" for _ in keys)
                rows = conn.execute(
                    f"SELECT key, value FROM kv_store WHERE key IN ({placeholders})", keys
                ).fetchall()
                data: dict[str, Optional[str]] = {key: None for key in keys}
            else:
                rows = conn.execute("SELECT key, value FROM kv_store").fetchall()
                data = {}
        for row in rows:
            data[row["key"]] = row["value"]
        return data

    def upsert(self, items: dict[str, Any]) -> int:
        entries = [(key, coerce_value(value)) for key, value in items.items() if key]
        if not entries:
            return 0
        with closing(self._connect()) as conn, conn:
            conn.executemany(_UPSERT, entries)
        return len(entries)

    def delete(self, keys: Iterable[str]) -> int:
        targets = [(key,) for key in keys if key]
        if not targets:
            return 0
        with closing(self._connect()) as conn, conn:
            conn.executemany("DELETE FROM kv_store WHERE key = ?", targets)
        return len(targets)
