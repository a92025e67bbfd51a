# src/taskdeck/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

TASKS_KEY = "todoTasks"
DAILY_TASKS_KEY = "dailyTasks"
LAST_DAILY_RESET_KEY = "lastDailyReset"


class SqliteKeyValueStore:
    """
    SQLite key-value store holding JSON-serialized collections.

    Every save replaces the whole value stored under a key; there is no
    partial/delta persistence.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "store.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot create store directory for {self._db_path}") from exc
        self._ensure_schema()
        logger.info("KeyValueStore ready db=%s keys=%s", self._db_path, self.count_keys())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    @contextlib.contextmanager
    def _conn(self, action: str) -> Iterator[sqlite3.Connection]:
        """Open a connection and turn storage failures into PersistenceError."""
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as exc:
            logger.error("KeyValueStore %s failed: cannot open %s", action, self._db_path)
            raise PersistenceError(f"Cannot open store {self._db_path}: {exc}") from exc
        try:
            yield conn
        except (sqlite3.Error, OSError) as exc:
            logger.error("KeyValueStore %s failed db=%s: %s", action, self._db_path, exc)
            raise PersistenceError(f"Store {action} failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._conn("schema") as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()

    def _read(self, key: str) -> str | None:
        with self._conn("read") as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row["value"])

    def _write(self, key: str, value: str) -> None:
        with self._conn("write") as conn:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()

    # ---- public API ----

    def count_keys(self) -> int:
        with self._conn("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM kv").fetchone()
            return int(n)

    def load(self, key: str) -> list[dict[str, Any]]:
        """
        Return the collection stored under `key`.

        Missing keys and values that are not a JSON list yield [];
        non-object entries inside the list are dropped.
        """
        raw = self._read(key)
        if raw is None:
            return []
        try:
            val = json.loads(raw)
        except ValueError:
            logger.warning("Stored value for key=%s is not valid JSON; ignoring it.", key)
            return []
        if not isinstance(val, list):
            logger.warning("Stored value for key=%s is not a list; ignoring it.", key)
            return []
        return [item for item in val if isinstance(item, dict)]

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        """Replace the whole collection stored under `key`."""
        self._write(key, json.dumps(items, ensure_ascii=False))
        logger.debug("Saved key=%s items=%d", key, len(items))

    def get_marker(self, key: str) -> str | None:
        return self._read(key)

    def set_marker(self, key: str, value: str) -> None:
        self._write(key, value)
        logger.debug("Marker key=%s set to %s", key, value)
