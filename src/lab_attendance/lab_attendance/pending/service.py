from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..attendance.model import AttendanceEvent
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import (
    combine_local,
    hours_between,
    local_date,
    local_day_bounds,
    now_utc,
    parse_clock_time,
    parse_local_instant,
    to_utc,
)
from ..common.validators import require_non_empty
from ..core.constants import (
    DEFAULT_CLEANUP_MAX_AGE_DAYS,
    DEFAULT_DEADLINE_DAYS,
    DEFAULT_DEADLINE_HOUR,
    TOKEN_BYTES,
)
from ..core.enums import AttendanceAction, PendingStatus, ResolvedBy
from ..core.exceptions import (
    AlreadyResolvedError,
    CrossDayError,
    DeadlineExpiredError,
    DuplicateError,
    InvalidTimeError,
    NotFoundError,
    ValidationError,
)
from ..students.repository import StudentRepository
from .model import PendingResolution, PendingSignout
from .reconciliation import AttendanceReconciler
from .repository import PendingRepository

logger = logging.getLogger(__name__)


def _new_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class PendingSignoutService:
    """Creates, looks up and resolves pending sign-out records.

    Every read-modify-write of the pending collection runs under the
    repository lock, and the ``status == pending`` precondition is checked on
    the snapshot read under that lock. Resolution persists the pending record
    first, then reconciles the provisional attendance event.
    """

    def __init__(
        self,
        pending: PendingRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        tz: ZoneInfo,
        attendance_service: Optional[AttendanceService] = None,
        deadline_hour: int = DEFAULT_DEADLINE_HOUR,
        deadline_days: int = DEFAULT_DEADLINE_DAYS,
        token_factory: Callable[[], str] = _new_token,
    ):
        self._pending = pending
        self._attendance = attendance
        self._students = students
        self._tz = tz
        self._attendance_service = attendance_service or AttendanceService(attendance, students, tz=tz)
        self._reconciler = AttendanceReconciler(attendance)
        self._deadline_hour = int(deadline_hour)
        self._deadline_days = int(deadline_days)
        self._token_factory = token_factory

    # -------- Time math --------
    def default_deadline(self, sign_in: datetime) -> datetime:
        """``deadline_hour`` o'clock, reference time, ``deadline_days`` after the sign-in date."""
        day = local_date(sign_in, self._tz) + timedelta(days=self._deadline_days)
        return combine_local(day, time(hour=self._deadline_hour), self._tz)

    def _parse_sign_out(self, record: PendingSignout, value: Optional[str]) -> datetime:
        """Clock time ('HH:MM') on the sign-in's local date, or an ISO timestamp.

        An ISO timestamp without an offset is read in the reference timezone.
        """
        v = (value or "").strip()
        if not v:
            raise InvalidTimeError("Please enter a valid sign-out time.")
        try:
            clock = parse_clock_time(v)
            if clock is not None:
                return combine_local(local_date(record.sign_in_timestamp, self._tz), clock, self._tz)
            return parse_local_instant(v, self._tz)
        except ValueError:
            raise InvalidTimeError("Please enter a valid sign-out time.")

    def _require_after_sign_in(self, record: PendingSignout, sign_out: datetime) -> None:
        if sign_out <= record.sign_in_timestamp:
            raise InvalidTimeError("Sign-out time must be after your sign-in time.")

    # -------- Creation --------
    def _create(
        self,
        *,
        ufid: str,
        name: str,
        email: str,
        sign_in_timestamp: datetime,
        deadline: Optional[datetime],
        record_id: Optional[str],
        token: Optional[str],
        sign_in_record_id: Optional[str],
        now: datetime,
    ) -> Tuple[PendingSignout, bool]:
        sign_in_timestamp = to_utc(sign_in_timestamp)
        deadline = to_utc(deadline) if deadline else self.default_deadline(sign_in_timestamp)
        if deadline <= sign_in_timestamp:
            raise ValidationError("Deadline must be after sign-in")

        with self._pending.locked():
            records = list(self._pending.list_all())

            for p in records:
                same_session = p.ufid == ufid and (
                    (sign_in_record_id and p.sign_in_record_id == sign_in_record_id)
                    or p.sign_in_timestamp == sign_in_timestamp
                )
                if p.is_pending and same_session:
                    return p, False

            tokens = {p.token for p in records}
            if token:
                clash = next((p for p in records if p.token == token), None)
                if clash and clash.id != record_id:
                    raise ValidationError("Token already in use")
            else:
                token = self._token_factory()
                while token in tokens:
                    token = self._token_factory()

            record = PendingSignout(
                id=record_id or uuid.uuid4().hex,
                ufid=ufid,
                name=name,
                email=email,
                token=token,
                sign_in_timestamp=sign_in_timestamp,
                deadline=deadline,
                status=PendingStatus.PENDING,
                sign_in_record_id=sign_in_record_id,
                created_at=now,
            )
            try:
                self._pending.add(record)
            except DuplicateError:
                # Retried submission of the same id.
                return self._pending.get_by_id(record.id), False

        logger.info("Created pending sign-out for %s (%s), deadline %s", name, ufid, deadline.isoformat())
        return record, True

    def create(
        self,
        *,
        ufid: str,
        name: str,
        email: str = "",
        sign_in_timestamp: datetime,
        deadline: Optional[datetime] = None,
        record_id: Optional[str] = None,
        token: Optional[str] = None,
        sign_in_record_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PendingSignout:
        """Idempotent: a repeated submission returns the existing record."""
        record, _ = self._create(
            ufid=require_non_empty(ufid, "UFID"),
            name=(name or "").strip(),
            email=(email or "").strip(),
            sign_in_timestamp=sign_in_timestamp,
            deadline=deadline,
            record_id=record_id,
            token=token,
            sign_in_record_id=sign_in_record_id,
            now=to_utc(now) if now else now_utc(),
        )
        return record

    def create_for_open_sessions(self, day: date, *, now: Optional[datetime] = None) -> List[PendingSignout]:
        """Open a pending record plus a provisional sign-out for each open session on ``day``.

        A session that already has a pending record but no linked provisional
        sign-out (an earlier run failed between the two writes) gets the
        missing sign-out.
        """
        now = to_utc(now) if now else now_utc()
        created: List[PendingSignout] = []

        for signin in self._attendance_service.open_sessions_for_date(day):
            student = self._students.get_by_ufid(signin.ufid)
            record, _ = self._create(
                ufid=signin.ufid,
                name=student.name if student else signin.name,
                email=student.email if student else "",
                sign_in_timestamp=signin.timestamp,
                deadline=None,
                record_id=None,
                token=None,
                sign_in_record_id=signin.id,
                now=now,
            )
            if any(e.pending_record_id == record.id for e in self._attendance.list_all()):
                continue

            self._attendance.append(
                AttendanceEvent(
                    id=uuid.uuid4().hex,
                    ufid=record.ufid,
                    name=record.name,
                    timestamp=record.sign_in_timestamp,
                    action=AttendanceAction.SIGNOUT,
                    pending_timestamp=True,
                    pending_record_id=record.id,
                )
            )
            created.append(record)

        if created:
            logger.info("Opened %d pending sign-out(s) for %s", len(created), day.isoformat())
        return created

    # -------- Lookup --------
    def lookup_by_token(self, token: str) -> PendingSignout:
        """Returns the record in any status so callers can tell the cases apart."""
        record = self._pending.get_by_token(token)
        if not record:
            raise NotFoundError("Invalid or expired link. This sign-out request was not found.")
        return record

    def get(self, record_id: str) -> PendingSignout:
        record = self._pending.get_by_id(record_id)
        if not record:
            raise NotFoundError("Pending record not found")
        return record

    def check_form_access(self, token: str, *, now: Optional[datetime] = None) -> PendingSignout:
        """Lookup for rendering the student form: must still be pending and within deadline."""
        now = to_utc(now) if now else now_utc()
        record = self.lookup_by_token(token)
        if not record.is_pending:
            raise AlreadyResolvedError("This sign-out has already been submitted.")
        if now > record.deadline:
            raise DeadlineExpiredError("The deadline has passed. Please contact the lab administrator.")
        return record

    # -------- Resolution --------
    def _apply(self, records: List[PendingSignout], updated: PendingSignout) -> None:
        self._pending.save_all([updated if p.id == updated.id else p for p in records])

    def _reconcile_earlier(self, record: PendingSignout) -> None:
        """Finish reconciliation for a record resolved by an earlier request.

        That request may have failed after saving the pending record but
        before the attendance log was written.
        """
        self._reconciler.reconcile(record, now=record.resolved_at or now_utc())

    def resolve_by_student(
        self,
        token: str,
        sign_out_time: Optional[str],
        *,
        now: Optional[datetime] = None,
    ) -> PendingResolution:
        now = to_utc(now) if now else now_utc()

        with self._pending.locked():
            records = list(self._pending.list_all())
            record = next((p for p in records if token and p.token == token), None)
            if not record:
                raise NotFoundError("Invalid or expired link. This sign-out request was not found.")
            if record.is_pending:
                if now > record.deadline:
                    raise DeadlineExpiredError("The deadline has passed. Please contact the lab administrator.")

                sign_out = self._parse_sign_out(record, sign_out_time)
                self._require_after_sign_in(record, sign_out)
                if local_date(sign_out, self._tz) != local_date(record.sign_in_timestamp, self._tz):
                    raise CrossDayError("Sign-out time must be on the same day as sign-in.")

                updated = replace(
                    record,
                    status=PendingStatus.RESOLVED,
                    resolved_at=now,
                    resolved_by=ResolvedBy.STUDENT,
                    submitted_sign_out_time=sign_out,
                )
                self._apply(records, updated)

        if not record.is_pending:
            self._reconcile_earlier(record)
            raise AlreadyResolvedError("This sign-out has already been submitted.")

        logger.info("Student resolved pending sign-out for %s (%s)", updated.name, updated.ufid)
        self._reconciler.reconcile(updated, now=now)
        return PendingResolution(record=updated, hours_worked=hours_between(updated.sign_in_timestamp, sign_out))

    def resolve_by_admin(
        self,
        record_id: str,
        *,
        sign_out_time: Optional[str] = None,
        present_only: bool = False,
        now: Optional[datetime] = None,
    ) -> PendingResolution:
        """Admin override: no deadline and no same-day rule."""
        now = to_utc(now) if now else now_utc()

        with self._pending.locked():
            records = list(self._pending.list_all())
            record = next((p for p in records if p.id == record_id), None)
            if not record:
                raise NotFoundError("Pending record not found")
            if record.is_pending:
                if present_only:
                    sign_out = record.sign_in_timestamp
                else:
                    sign_out = self._parse_sign_out(record, sign_out_time)
                    self._require_after_sign_in(record, sign_out)

                updated = replace(
                    record,
                    status=PendingStatus.RESOLVED,
                    resolved_at=now,
                    resolved_by=ResolvedBy.ADMIN,
                    submitted_sign_out_time=sign_out,
                    present_only=bool(present_only),
                )
                self._apply(records, updated)

        if not record.is_pending:
            self._reconcile_earlier(record)
            raise AlreadyResolvedError("This record has already been resolved")

        logger.info(
            "Admin resolved pending sign-out for %s (%s)%s",
            updated.name,
            updated.ufid,
            " as present only" if present_only else "",
        )
        self._reconciler.reconcile(updated, now=now)
        return PendingResolution(record=updated, hours_worked=hours_between(updated.sign_in_timestamp, sign_out))

    def reconcile(self, record: PendingSignout, *, now: Optional[datetime] = None) -> Optional[AttendanceEvent]:
        return self._reconciler.reconcile(record, now=now or now_utc())

    # -------- Housekeeping --------
    def cleanup(self, *, max_age_days: int = DEFAULT_CLEANUP_MAX_AGE_DAYS, now: Optional[datetime] = None) -> int:
        """Drop resolved/expired records older than ``max_age_days``. Pending records always stay."""
        if int(max_age_days) < 0:
            raise ValidationError("maxAgeDays must be >= 0")
        now = to_utc(now) if now else now_utc()
        cutoff = now - timedelta(days=int(max_age_days))

        with self._pending.locked():
            records = list(self._pending.list_all())
            kept = [p for p in records if p.is_pending or (p.resolved_at or p.deadline) > cutoff]
            removed = len(records) - len(kept)
            if removed:
                self._pending.save_all(kept)

        if removed:
            logger.info("Removed %d old pending sign-out record(s)", removed)
        return removed

    def list_pending(self, *, now: Optional[datetime] = None) -> dict:
        now = to_utc(now) if now else now_utc()
        records = sorted(self._pending.list_all(), key=lambda p: p.sign_in_timestamp, reverse=True)
        _, today_end = local_day_bounds(local_date(now, self._tz), self._tz)

        def count(status: PendingStatus) -> int:
            return sum(1 for p in records if p.status == status)

        return {
            "records": records,
            "stats": {
                "total": len(records),
                "pending": count(PendingStatus.PENDING),
                "resolved": count(PendingStatus.RESOLVED),
                "expired": count(PendingStatus.EXPIRED),
                "overdue": sum(1 for p in records if p.is_overdue(now)),
                "expiringToday": sum(1 for p in records if p.is_pending and now <= p.deadline < today_end),
            },
        }
