from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceEvent
from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceAction
from .model import PendingSignout

logger = logging.getLogger(__name__)


class AttendanceReconciler:
    """Copies a resolved sign-out time onto the provisional attendance event."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    @staticmethod
    def _matches(event: AttendanceEvent, record: PendingSignout) -> bool:
        return event.pending_record_id == record.id

    @staticmethod
    def _matches_fallback(event: AttendanceEvent, record: PendingSignout) -> bool:
        return (
            event.ufid == record.ufid
            and event.action == AttendanceAction.SIGNOUT
            and event.pending_timestamp
            and event.pending_record_id is None
        )

    def reconcile(self, record: PendingSignout, *, now: datetime) -> Optional[AttendanceEvent]:
        if record.submitted_sign_out_time is None:
            return None

        with self._attendance.locked():
            events = list(self._attendance.list_all())
            idx = next((i for i, e in enumerate(events) if self._matches(e, record)), None)
            if idx is None:
                idx = next((i for i, e in enumerate(events) if self._matches_fallback(e, record)), None)
            if idx is None:
                logger.warning("No provisional sign-out found for pending record %s (%s)", record.id, record.ufid)
                return None

            old = events[idx]
            if not old.pending_timestamp:
                # Already reconciled on an earlier attempt.
                return old
            events[idx] = replace(
                old,
                timestamp=record.submitted_sign_out_time,
                pending_timestamp=False,
                pending_record_id=old.pending_record_id or record.id,
                resolved_at=now,
                resolved_by=record.resolved_by,
                present_only=record.present_only,
            )
            self._attendance.save_all(events)

        logger.info(
            "Reconciled sign-out for %s: %s -> %s",
            record.name,
            old.timestamp.isoformat(),
            record.submitted_sign_out_time.isoformat(),
        )
        return events[idx]
