from __future__ import annotations

import json
from typing import Iterable

from .connection import DBConfig, DatabaseConnection

RECORD_STORE_DDL = """
CREATE TABLE IF NOT EXISTS record_store (
    store_key VARCHAR(64) NOT NULL PRIMARY KEY,
    payload LONGTEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci
"""


def _factory(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection.get_instance(DBConfig.from_dict(db_config))


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _factory(db_config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict) -> None:
    ensure_database_exists(db_config)

    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute(RECORD_STORE_DDL)
        conn.commit()
    finally:
        conn.close()


def seed_collection(db_config: dict, *, key: str, items: Iterable[dict], overwrite: bool = False) -> bool:
    """Write a collection unless it already exists. Returns True if written."""
    payload = json.dumps(list(items), ensure_ascii=False)

    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        if overwrite:
            cur.execute(
                """
                INSERT INTO record_store(store_key, payload) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE payload=VALUES(payload)
                """,
                (key, payload),
            )
        else:
            cur.execute("INSERT IGNORE INTO record_store(store_key, payload) VALUES(%s, %s)", (key, payload))
        written = cur.rowcount > 0
        conn.commit()
        return written
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
