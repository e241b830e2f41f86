from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.lab_attendance.lab_attendance.attendance.service import NEVER_SIGNED_IN
from src.lab_attendance.lab_attendance.core.exceptions import ValidationError
from src.lab_attendance.lab_attendance.students.model import Student

ET = ZoneInfo("America/New_York")


def et(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=ET).astimezone(timezone.utc)


def test_sign_in_then_out(attendance_service):
    assert attendance_service.current_status("12345678") == NEVER_SIGNED_IN

    event = attendance_service.sign_in("12345678", now=et(2024, 5, 1, 9, 0))
    assert event.name == "Alex Demo"
    assert attendance_service.current_status("12345678") == "signin"

    attendance_service.sign_out("12345678", now=et(2024, 5, 1, 17, 0))
    assert attendance_service.current_status("12345678") == "signout"


def test_double_sign_in_is_rejected(attendance_service):
    attendance_service.sign_in("12345678", now=et(2024, 5, 1, 9, 0))
    with pytest.raises(ValidationError):
        attendance_service.sign_in("12345678", now=et(2024, 5, 1, 9, 5))


def test_sign_out_without_sign_in_is_rejected(attendance_service):
    with pytest.raises(ValidationError):
        attendance_service.sign_out("12345678", now=et(2024, 5, 1, 9, 0))


def test_unknown_or_inactive_students_cannot_sign_in(attendance_service, students_repo):
    with pytest.raises(ValidationError):
        attendance_service.sign_in("99999999")

    students_repo.replace(Student(ufid="23456789", name="Sam Example", active=False))
    with pytest.raises(ValidationError):
        attendance_service.sign_in("23456789")


def test_open_sessions_use_local_calendar_day(attendance_service):
    # 22:30 EDT on May 1st is already May 2nd in UTC.
    attendance_service.sign_in("12345678", now=et(2024, 5, 1, 22, 30))
    attendance_service.sign_in("23456789", now=et(2024, 5, 2, 8, 0))

    assert [e.ufid for e in attendance_service.open_sessions_for_date(date(2024, 5, 1))] == ["12345678"]
    assert [e.ufid for e in attendance_service.open_sessions_for_date(date(2024, 5, 2))] == ["23456789"]


def test_list_events_newest_first_with_search(attendance_service):
    attendance_service.sign_in("12345678", now=et(2024, 5, 1, 9, 0))
    attendance_service.sign_in("23456789", now=et(2024, 5, 1, 10, 0))
    attendance_service.sign_out("12345678", now=et(2024, 5, 1, 11, 0))

    data = attendance_service.list_events()
    assert [(e.ufid, e.action.value) for e in data["events"]] == [
        ("12345678", "signout"),
        ("23456789", "signin"),
        ("12345678", "signin"),
    ]
    assert attendance_service.list_events(search="sam")["total"] == 1
    assert attendance_service.list_events(day=date(2024, 5, 2))["total"] == 0


def test_dashboard_stats(attendance_service, pending_service):
    attendance_service.sign_in("12345678", now=et(2024, 5, 1, 9, 0))
    attendance_service.sign_in("23456789", now=et(2024, 5, 1, 10, 0))
    attendance_service.sign_out("23456789", now=et(2024, 5, 1, 12, 0))
    pending_service.create(
        ufid="12345678",
        name="Alex Demo",
        sign_in_timestamp=et(2024, 4, 30, 9, 0),
        now=et(2024, 4, 30, 23, 0),
    )

    stats = attendance_service.dashboard_stats(
        now=et(2024, 5, 1, 13, 0),
        pending_records=pending_service.list_pending()["records"],
    )

    assert stats == {
        "totalStudents": 2,
        "activeStudents": 2,
        "currentlySignedIn": 1,
        "todaysVisits": 2,
        "weeklyVisits": 2,
        "totalRecords": 3,
        "pendingSignouts": 1,
    }
