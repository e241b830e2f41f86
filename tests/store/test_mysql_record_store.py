from __future__ import annotations

import json

import mysql.connector
import pytest

from src.lab_attendance.lab_attendance.core.exceptions import StoreError
from src.lab_attendance.lab_attendance.store.mysql_record_store import MySQLRecordStore


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self._row = None

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), params))
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise mysql.connector.Error("boom")
        if "GET_LOCK" in sql:
            self._row = (self._conn.lock_result,)
        elif "RELEASE_LOCK" in sql:
            self._row = (1,)
        elif sql.lstrip().startswith("SELECT payload"):
            payload = self._conn.rows.get(params[0])
            self._row = {"payload": payload} if payload is not None else None
        elif "INSERT INTO record_store" in sql:
            self._conn.rows[params[0]] = params[1]

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, factory):
        self.rows = factory.rows
        self.executed = factory.executed
        self.fail_on = factory.fail_on
        self.lock_result = factory.lock_result
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, rows=None, *, fail_on=None, lock_result=1):
        self.rows = dict(rows or {})
        self.executed = []
        self.fail_on = fail_on
        self.lock_result = lock_result
        self.connections = []

    def connect(self):
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn


def test_get_missing_key_is_empty_list():
    store = MySQLRecordStore(FakeConnectionFactory())
    assert store.get("students") == []


def test_set_then_get_round_trips_payload():
    factory = FakeConnectionFactory()
    store = MySQLRecordStore(factory)

    store.set("students", [{"ufid": "12345678", "name": "Zoë"}])

    assert json.loads(factory.rows["students"]) == [{"ufid": "12345678", "name": "Zoë"}]
    assert store.get("students") == [{"ufid": "12345678", "name": "Zoë"}]
    assert all(c.closed for c in factory.connections)


def test_corrupted_or_non_list_payload_raises_store_error():
    store = MySQLRecordStore(FakeConnectionFactory({"a": "{not json", "b": '{"x": 1}'}))

    with pytest.raises(StoreError):
        store.get("a")
    with pytest.raises(StoreError):
        store.get("b")


def test_driver_errors_become_store_errors():
    store = MySQLRecordStore(FakeConnectionFactory(fail_on="record_store"))

    with pytest.raises(StoreError):
        store.get("students")
    with pytest.raises(StoreError):
        store.set("students", [])


def test_lock_acquires_and_releases_named_lock():
    factory = FakeConnectionFactory()
    store = MySQLRecordStore(factory, lock_timeout_seconds=5)

    with store.lock("pending_signouts"):
        assert factory.executed[-1] == ("SELECT GET_LOCK(%s, %s)", ("record_store:pending_signouts", 5))

    assert factory.executed[-1] == ("SELECT RELEASE_LOCK(%s)", ("record_store:pending_signouts",))
    assert factory.connections[0].closed


def test_lock_released_when_body_raises():
    factory = FakeConnectionFactory()
    store = MySQLRecordStore(factory)

    with pytest.raises(RuntimeError):
        with store.lock("attendance"):
            raise RuntimeError("body failed")

    assert factory.executed[-1][0] == "SELECT RELEASE_LOCK(%s)"


def test_lock_timeout_raises_store_error():
    factory = FakeConnectionFactory(lock_result=0)
    store = MySQLRecordStore(factory)

    with pytest.raises(StoreError):
        with store.lock("attendance"):
            pytest.fail("body must not run without the lock")

    assert not any("RELEASE_LOCK" in sql for sql, _ in factory.executed)
    assert factory.connections[0].closed
