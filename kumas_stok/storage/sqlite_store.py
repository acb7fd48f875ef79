"""Yerel gömülü anahtar/değer deposu - SQLite üzerinde JSON dokümanlar."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from kumas_stok.storage.base import BaseStore, StoreError, key_field

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    store TEXT NOT NULL,
    key   TEXT NOT NULL,
    data  TEXT NOT NULL,
    PRIMARY KEY (store, key)
)
"""


class SqliteStore(BaseStore):
    """Tek bir `records` tablosunda depo/anahtar bazlı JSON kayıtları."""

    backend_name = "sqlite"

    def __init__(self, path: str = "kumas_stok.db") -> None:
        self.path = path
        try:
            self._conn = sqlite3.connect(path)
        except sqlite3.Error as e:
            raise StoreError(f"SQLite açılamadı: {path}") from e
        self.init()

    def init(self) -> None:
        with self._cursor() as cur:
            cur.execute(_SCHEMA)
        logger.debug("SQLite deposu hazır: %s", self.path)

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        try:
            with self._conn:
                yield self._conn.cursor()
        except sqlite3.Error as e:
            logger.error("SQLite hatası: %s", e)
            raise StoreError(str(e)) from e

    def _get(self, store_name: str, key: str) -> Optional[dict]:
        with self._cursor() as cur:
            row = cur.execute(
                "SELECT data FROM records WHERE store = ? AND key = ?", (store_name, key)
            ).fetchone()
        return json.loads(row[0]) if row else None

    def _put(self, store_name: str, item: dict) -> None:
        self._put_many(store_name, [item])

    def _put_many(self, store_name: str, items: list[dict]) -> None:
        field_name = key_field(store_name)
        rows = [
            (store_name, str(item[field_name]), json.dumps(item, ensure_ascii=False))
            for item in items
        ]
        with self._cursor() as cur:
            cur.executemany(
                "INSERT OR REPLACE INTO records (store, key, data) VALUES (?, ?, ?)", rows
            )

    def _remove(self, store_name: str, key: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM records WHERE store = ? AND key = ?", (store_name, key))
            return cur.rowcount > 0

    def _scan(self, store_name: str) -> list[dict]:
        with self._cursor() as cur:
            rows = cur.execute(
                "SELECT data FROM records WHERE store = ? ORDER BY rowid", (store_name,)
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def _query_index(self, store_name: str, index_name: str, value: Any) -> list[dict]:
        with self._cursor() as cur:
            rows = cur.execute(
                "SELECT data FROM records WHERE store = ? AND json_extract(data, ?) = ? "
                "ORDER BY rowid",
                (store_name, f"$.{index_name}", value),
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def _clear(self, store_name: str) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM records WHERE store = ?", (store_name,))
