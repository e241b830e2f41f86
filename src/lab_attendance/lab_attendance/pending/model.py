from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_instant, hours_between, parse_instant, parse_optional_instant, to_utc
from ..core.enums import PendingStatus, ResolvedBy


@dataclass(frozen=True)
class PendingSignout:
    """A session whose end time was not captured and awaits confirmation."""

    id: str
    ufid: str
    name: str
    email: str
    token: str
    sign_in_timestamp: datetime
    deadline: datetime
    status: PendingStatus = PendingStatus.PENDING
    sign_in_record_id: Optional[str] = None
    created_at: Optional[datetime] = None
    submitted_sign_out_time: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[ResolvedBy] = None
    present_only: bool = False

    @property
    def is_pending(self) -> bool:
        return self.status == PendingStatus.PENDING

    def is_overdue(self, now: datetime) -> bool:
        return self.is_pending and to_utc(now) > self.deadline

    def effective_status(self, now: datetime) -> PendingStatus:
        """Status for display: a pending record past its deadline reads as expired."""
        if self.is_overdue(now):
            return PendingStatus.EXPIRED
        return self.status

    @property
    def hours_worked(self) -> Optional[float]:
        if self.submitted_sign_out_time is None:
            return None
        return hours_between(self.sign_in_timestamp, self.submitted_sign_out_time)

    @classmethod
    def from_dict(cls, data: dict) -> "PendingSignout":
        resolved_by = data.get("resolvedBy")
        return cls(
            id=str(data["id"]),
            ufid=str(data["ufid"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            token=str(data["token"]),
            sign_in_timestamp=parse_instant(data["signInTimestamp"]),
            deadline=parse_instant(data["deadline"]),
            status=PendingStatus(data.get("status") or PendingStatus.PENDING.value),
            sign_in_record_id=str(data["signInRecordId"]) if data.get("signInRecordId") else None,
            created_at=parse_optional_instant(data.get("createdAt")),
            submitted_sign_out_time=parse_optional_instant(data.get("submittedSignOutTime")),
            resolved_at=parse_optional_instant(data.get("resolvedAt")),
            # Older records may carry 'system' from the removed expiry job.
            resolved_by=ResolvedBy(resolved_by) if resolved_by in {r.value for r in ResolvedBy} else None,
            present_only=bool(data.get("presentOnly", False)),
        )

    def to_dict(self) -> dict:
        def _fmt(v: Optional[datetime]) -> Optional[str]:
            return format_instant(v) if v else None

        return {
            "id": self.id,
            "ufid": self.ufid,
            "name": self.name,
            "email": self.email,
            "token": self.token,
            "signInTimestamp": format_instant(self.sign_in_timestamp),
            "signInRecordId": self.sign_in_record_id,
            "createdAt": _fmt(self.created_at),
            "deadline": format_instant(self.deadline),
            "status": self.status.value,
            "submittedSignOutTime": _fmt(self.submitted_sign_out_time),
            "resolvedAt": _fmt(self.resolved_at),
            "resolvedBy": self.resolved_by.value if self.resolved_by else None,
            "presentOnly": self.present_only,
        }


@dataclass(frozen=True)
class PendingResolution:
    """Outcome of a successful resolution."""

    record: PendingSignout
    hours_worked: float

    @property
    def hours_display(self) -> str:
        return f"{self.hours_worked:.2f}"
