from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol, Sequence

from ..core.constants import PENDING_KEY
from ..core.exceptions import DuplicateError
from ..store.repository import RecordStore
from .model import PendingSignout


class PendingRepository(Protocol):
    def list_all(self) -> Sequence[PendingSignout]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[PendingSignout]:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[PendingSignout]:
        raise NotImplementedError

    def add(self, record: PendingSignout) -> None:
        """Append a record; raises DuplicateError if its id is taken."""

        raise NotImplementedError

    def save_all(self, records: Sequence[PendingSignout]) -> None:
        raise NotImplementedError

    def locked(self) -> ContextManager[None]:
        raise NotImplementedError


class StorePendingRepository(PendingRepository):
    """Pending sign-outs kept as one list under ``pending_signouts``.

    Methods do not lock on their own; the service holds ``locked()`` around
    each read-modify-write cycle.
    """

    def __init__(self, store: RecordStore):
        self._store = store

    def list_all(self) -> List[PendingSignout]:
        return [PendingSignout.from_dict(d) for d in self._store.get(PENDING_KEY)]

    def get_by_token(self, token: str) -> Optional[PendingSignout]:
        if not token:
            return None
        return next((p for p in self.list_all() if p.token == token), None)

    def get_by_id(self, record_id: str) -> Optional[PendingSignout]:
        return next((p for p in self.list_all() if p.id == record_id), None)

    def add(self, record: PendingSignout) -> None:
        records = self.list_all()
        if any(p.id == record.id for p in records):
            raise DuplicateError(f"Pending record {record.id} already exists")
        records.append(record)
        self.save_all(records)

    def save_all(self, records: Sequence[PendingSignout]) -> None:
        self._store.set(PENDING_KEY, [p.to_dict() for p in records])

    def locked(self) -> ContextManager[None]:
        return self._store.lock(PENDING_KEY)
