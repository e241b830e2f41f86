from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from zoneinfo import ZoneInfo

import pytest

from src.lab_attendance.lab_attendance.attendance.repository import StoreAttendanceRepository
from src.lab_attendance.lab_attendance.attendance.service import AttendanceService
from src.lab_attendance.lab_attendance.pending.repository import StorePendingRepository
from src.lab_attendance.lab_attendance.pending.service import PendingSignoutService
from src.lab_attendance.lab_attendance.students.model import Student
from src.lab_attendance.lab_attendance.students.repository import StoreStudentRepository

ET = ZoneInfo("America/New_York")


class InMemoryRecordStore:
    """Record store double: deep-copies on read/write like a real serializer."""

    def __init__(self, initial: dict | None = None):
        self._data: dict[str, list] = copy.deepcopy(initial or {})
        self._locks: dict[str, threading.Lock] = {}
        self.writes: list[str] = []

    def get(self, key):
        return copy.deepcopy(self._data.get(key, []))

    def set(self, key, items):
        self.writes.append(key)
        self._data[key] = copy.deepcopy(list(items))

    @contextmanager
    def lock(self, key):
        lock = self._locks.setdefault(key, threading.Lock())
        # Non-blocking acquire turns accidental nested locking into a test failure.
        assert lock.acquire(blocking=False), f"lock on {key} is already held"
        try:
            yield
        finally:
            lock.release()

    def raw(self, key):
        return self._data.get(key, [])


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def students_repo(store):
    repo = StoreStudentRepository(store)
    repo.add(Student(ufid="12345678", name="Alex Demo", email="alex@example.edu"))
    repo.add(Student(ufid="23456789", name="Sam Example", email="sam@example.edu"))
    return repo


@pytest.fixture
def attendance_repo(store):
    return StoreAttendanceRepository(store)


@pytest.fixture
def pending_repo(store):
    return StorePendingRepository(store)


@pytest.fixture
def attendance_service(attendance_repo, students_repo):
    return AttendanceService(attendance_repo, students_repo, tz=ET)


@pytest.fixture
def pending_service(pending_repo, attendance_repo, students_repo, attendance_service):
    return PendingSignoutService(
        pending_repo,
        attendance_repo,
        students_repo,
        tz=ET,
        attendance_service=attendance_service,
    )


@pytest.fixture
def app():
    from src.lab_attendance.lab_attendance.main import create_app

    flask_app = create_app("config.testing", store=InMemoryRecordStore())
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def container(app):
    return app.extensions["lab_attendance"]


@pytest.fixture
def client(app):
    return app.test_client()
