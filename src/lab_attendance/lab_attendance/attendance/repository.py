from __future__ import annotations

from typing import ContextManager, List, Protocol, Sequence

from ..core.constants import ATTENDANCE_KEY
from ..store.repository import RecordStore
from .model import AttendanceEvent


class AttendanceRepository(Protocol):
    def list_all(self) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def append(self, *events: AttendanceEvent) -> None:
        raise NotImplementedError

    def save_all(self, events: Sequence[AttendanceEvent]) -> None:
        """Replace the whole log. Callers hold ``locked()`` around read + save."""

        raise NotImplementedError

    def locked(self) -> ContextManager[None]:
        raise NotImplementedError


class StoreAttendanceRepository(AttendanceRepository):
    def __init__(self, store: RecordStore):
        self._store = store

    def list_all(self) -> List[AttendanceEvent]:
        return [AttendanceEvent.from_dict(d) for d in self._store.get(ATTENDANCE_KEY)]

    def append(self, *events: AttendanceEvent) -> None:
        with self.locked():
            raw = self._store.get(ATTENDANCE_KEY)
            raw.extend(e.to_dict() for e in events)
            self._store.set(ATTENDANCE_KEY, raw)

    def save_all(self, events: Sequence[AttendanceEvent]) -> None:
        self._store.set(ATTENDANCE_KEY, [e.to_dict() for e in events])

    def locked(self) -> ContextManager[None]:
        return self._store.lock(ATTENDANCE_KEY)
