from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Iterator, List

import mysql.connector

from ..core.exceptions import StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import RecordStore

logger = logging.getLogger(__name__)


class MySQLRecordStore(RecordStore):
    """Record store backed by a single ``record_store`` table (key -> JSON list)."""

    def __init__(self, conn_factory: DatabaseConnection, *, lock_timeout_seconds: int = 10):
        self._conn_factory = conn_factory
        self._lock_timeout = int(lock_timeout_seconds)

    def get(self, key: str) -> List[dict]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT payload FROM record_store WHERE store_key=%s", (key,))
                row = fetchone(cur)
        except mysql.connector.Error as e:
            logger.exception("Failed to read collection %s", key)
            raise StoreError(f"Failed to read {key}") from e

        if not row:
            return []
        try:
            data = json.loads(row["payload"])
        except ValueError as e:
            raise StoreError(f"Corrupted payload for {key}") from e
        if not isinstance(data, list):
            raise StoreError(f"Payload for {key} is not a list")
        return data

    def set(self, key: str, items: List[dict]) -> None:
        payload = json.dumps(list(items), ensure_ascii=False)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO record_store(store_key, payload) VALUES(%s, %s)
                    ON DUPLICATE KEY UPDATE payload=VALUES(payload)
                    """,
                    (key, payload),
                )
        except mysql.connector.Error as e:
            logger.exception("Failed to write collection %s", key)
            raise StoreError(f"Failed to write {key}") from e

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Named MySQL lock (GET_LOCK) held on a dedicated connection."""
        name = f"record_store:{key}"
        try:
            conn = self._conn_factory.connect()
        except mysql.connector.Error as e:
            raise StoreError(f"Failed to lock {key}") from e

        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT GET_LOCK(%s, %s)", (name, self._lock_timeout))
                row = cur.fetchone()
                if not row or row[0] != 1:
                    raise StoreError(f"Timed out waiting for lock on {key}")
                try:
                    yield
                finally:
                    cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                    cur.fetchone()
            finally:
                cur.close()
        except mysql.connector.Error as e:
            raise StoreError(f"Lock failure on {key}") from e
        finally:
            conn.close()
