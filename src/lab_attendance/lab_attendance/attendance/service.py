from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import local_date, now_utc
from ..common.validators import clamp_page, require_ufid
from ..core.constants import DEFAULT_PAGE_SIZE, DEFAULT_WEEKLY_WINDOW_DAYS, MAX_PAGE_SIZE
from ..core.enums import AttendanceAction, PendingStatus
from ..core.exceptions import ValidationError
from ..students.repository import StudentRepository
from .model import AttendanceEvent
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

NEVER_SIGNED_IN = "never_signed_in"


def chronological(events: Sequence[AttendanceEvent]) -> List[AttendanceEvent]:
    """Sort by timestamp; on ties a sign-in comes before a sign-out."""
    return sorted(events, key=lambda e: (e.timestamp, e.action != AttendanceAction.SIGNIN))


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        tz: ZoneInfo,
    ):
        self._attendance = attendance
        self._students = students
        self._tz = tz

    def current_status(self, ufid: str) -> str:
        events = [e for e in self._attendance.list_all() if e.ufid == ufid]
        if not events:
            return NEVER_SIGNED_IN
        return chronological(events)[-1].action.value

    def _record(self, ufid: str, action: AttendanceAction, now: Optional[datetime]) -> AttendanceEvent:
        ufid = require_ufid(ufid)
        student = self._students.get_by_ufid(ufid)
        if not student or not student.active:
            logger.warning("Unauthorized %s attempt for UFID %s", action.value, ufid)
            raise ValidationError("Student not authorized. Please contact admin to be added to the system.")

        status = self.current_status(ufid)
        if action == AttendanceAction.SIGNIN and status == AttendanceAction.SIGNIN.value:
            raise ValidationError(f"{student.name} is already signed in. Please sign out first.")
        if action == AttendanceAction.SIGNOUT:
            if status == AttendanceAction.SIGNOUT.value:
                raise ValidationError(f"{student.name} is already signed out. Please sign in first.")
            if status == NEVER_SIGNED_IN:
                raise ValidationError(f"{student.name} has never signed in. Please sign in first.")

        event = AttendanceEvent(
            id=uuid.uuid4().hex,
            ufid=ufid,
            name=student.name,
            timestamp=now or now_utc(),
            action=action,
        )
        self._attendance.append(event)
        logger.info("%s recorded for %s (%s)", action.value, student.name, ufid)
        return event

    def sign_in(self, ufid: str, *, now: Optional[datetime] = None) -> AttendanceEvent:
        return self._record(ufid, AttendanceAction.SIGNIN, now)

    def sign_out(self, ufid: str, *, now: Optional[datetime] = None) -> AttendanceEvent:
        return self._record(ufid, AttendanceAction.SIGNOUT, now)

    def events_for_date(self, day: date) -> List[AttendanceEvent]:
        return [e for e in self._attendance.list_all() if local_date(e.timestamp, self._tz) == day]

    def open_sessions_for_date(self, day: date) -> List[AttendanceEvent]:
        """Last sign-in per student on ``day`` with no later sign-out that day."""
        last_signin: dict[str, Optional[AttendanceEvent]] = {}
        for e in chronological(self.events_for_date(day)):
            last_signin[e.ufid] = e if e.action == AttendanceAction.SIGNIN else None
        return [e for e in last_signin.values() if e is not None]

    def list_events(
        self,
        *,
        page=1,
        page_size=DEFAULT_PAGE_SIZE,
        search: str = "",
        day: Optional[date] = None,
    ) -> dict:
        page, page_size = clamp_page(page, page_size, default_size=DEFAULT_PAGE_SIZE, max_size=MAX_PAGE_SIZE)
        events = self.events_for_date(day) if day else list(self._attendance.list_all())

        needle = (search or "").strip().lower()
        if needle:
            events = [e for e in events if needle in e.name.lower() or needle in e.ufid]

        events = list(reversed(chronological(events)))
        start = (page - 1) * page_size
        return {
            "events": events[start:start + page_size],
            "total": len(events),
            "page": page,
            "page_size": page_size,
        }

    def dashboard_stats(self, *, now: Optional[datetime] = None, pending_records: Sequence = ()) -> dict:
        now = now or now_utc()
        today = local_date(now, self._tz)
        week_start = today - timedelta(days=DEFAULT_WEEKLY_WINDOW_DAYS)

        events = list(self._attendance.list_all())
        todays = [e for e in events if local_date(e.timestamp, self._tz) == today]
        weekly = [e for e in events if local_date(e.timestamp, self._tz) >= week_start]
        students = list(self._students.list_all())

        return {
            "totalStudents": len(students),
            "activeStudents": sum(1 for s in students if s.active),
            "currentlySignedIn": len(self.open_sessions_for_date(today)),
            "todaysVisits": len({e.ufid for e in todays if e.action == AttendanceAction.SIGNIN}),
            "weeklyVisits": len({e.ufid for e in weekly if e.action == AttendanceAction.SIGNIN}),
            "totalRecords": len(events),
            "pendingSignouts": sum(1 for p in pending_records if p.status == PendingStatus.PENDING),
        }
