from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_instant, parse_instant, parse_optional_instant
from ..core.enums import AttendanceAction, ResolvedBy

_KNOWN_KEYS = {
    "id",
    "ufid",
    "name",
    "timestamp",
    "action",
    "pendingTimestamp",
    "pendingRecordId",
    "resolvedAt",
    "resolvedBy",
    "presentOnly",
}


@dataclass(frozen=True)
class AttendanceEvent:
    """A single sign-in or sign-out entry in the attendance log.

    A provisional sign-out carries ``pending_timestamp=True`` and points at the
    pending sign-out record that will supply its real timestamp.
    """

    id: str
    ufid: str
    name: str
    timestamp: datetime
    action: AttendanceAction
    pending_timestamp: bool = False
    pending_record_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[ResolvedBy] = None
    present_only: bool = False
    # Fields written by other clients; carried through rewrites untouched.
    extra: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceEvent":
        resolved_by = data.get("resolvedBy")
        return cls(
            id=str(data["id"]),
            ufid=str(data["ufid"]),
            name=str(data.get("name") or ""),
            timestamp=parse_instant(data["timestamp"]),
            action=AttendanceAction(data["action"]),
            pending_timestamp=bool(data.get("pendingTimestamp", False)),
            pending_record_id=str(data["pendingRecordId"]) if data.get("pendingRecordId") else None,
            resolved_at=parse_optional_instant(data.get("resolvedAt")),
            resolved_by=ResolvedBy(resolved_by) if resolved_by in {r.value for r in ResolvedBy} else None,
            present_only=bool(data.get("presentOnly", False)),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "ufid": self.ufid,
                "name": self.name,
                "timestamp": format_instant(self.timestamp),
                "action": self.action.value,
                "pendingTimestamp": self.pending_timestamp,
            }
        )
        if self.pending_record_id:
            data["pendingRecordId"] = self.pending_record_id
        if self.resolved_at:
            data["resolvedAt"] = format_instant(self.resolved_at)
        if self.resolved_by:
            data["resolvedBy"] = self.resolved_by.value
        if self.present_only:
            data["presentOnly"] = True
        return data
