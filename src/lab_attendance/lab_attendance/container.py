from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from .attendance.repository import StoreAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_CLEANUP_MAX_AGE_DAYS,
    DEFAULT_DEADLINE_DAYS,
    DEFAULT_DEADLINE_HOUR,
    DEFAULT_REFERENCE_TIMEZONE,
)
from .database.connection import DBConfig, DatabaseConnection
from .pending.repository import StorePendingRepository
from .pending.service import PendingSignoutService
from .store.mysql_record_store import MySQLRecordStore
from .store.repository import RecordStore
from .students.repository import StoreStudentRepository
from .students.service import StudentService
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    store: RecordStore
    tz: ZoneInfo
    cleanup_max_age_days: int

    students_repo: StoreStudentRepository
    attendance_repo: StoreAttendanceRepository
    pending_repo: StorePendingRepository

    auth_service: AuthService
    student_service: StudentService
    attendance_service: AttendanceService
    pending_service: PendingSignoutService


def build_container(settings, *, store: Optional[RecordStore] = None) -> Container:
    """Wire repositories and services from a settings module.

    ``store`` overrides the MySQL record store (tests pass an in-memory one).
    """
    if store is None:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        store = MySQLRecordStore(conn)

    tz = ZoneInfo(getattr(settings, "REFERENCE_TIMEZONE", DEFAULT_REFERENCE_TIMEZONE))

    students_repo = StoreStudentRepository(store)
    attendance_repo = StoreAttendanceRepository(store)
    pending_repo = StorePendingRepository(store)

    auth_service = AuthService(
        admin_username=getattr(settings, "ADMIN_USERNAME", ""),
        admin_password_hash=getattr(settings, "ADMIN_PASSWORD_HASH", ""),
        api_key=getattr(settings, "SYNC_API_KEY", None),
    )
    student_service = StudentService(students_repo)
    attendance_service = AttendanceService(attendance_repo, students_repo, tz=tz)
    pending_service = PendingSignoutService(
        pending_repo,
        attendance_repo,
        students_repo,
        tz=tz,
        attendance_service=attendance_service,
        deadline_hour=int(getattr(settings, "DEADLINE_HOUR", DEFAULT_DEADLINE_HOUR)),
        deadline_days=int(getattr(settings, "DEADLINE_DAYS", DEFAULT_DEADLINE_DAYS)),
    )

    return Container(
        store=store,
        tz=tz,
        cleanup_max_age_days=int(getattr(settings, "CLEANUP_MAX_AGE_DAYS", DEFAULT_CLEANUP_MAX_AGE_DAYS)),
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        pending_repo=pending_repo,
        auth_service=auth_service,
        student_service=student_service,
        attendance_service=attendance_service,
        pending_service=pending_service,
    )
