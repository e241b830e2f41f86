from __future__ import annotations

from typing import ContextManager, List, Protocol


class RecordStore(Protocol):
    """Key-value persistence holding whole collections under fixed keys.

    Every mutation is read-whole-list, modify, write-whole-list. Callers that
    need read-modify-write exclusivity hold ``lock(key)`` around the cycle.
    """

    def get(self, key: str) -> List[dict]:
        """Return the stored list, or an empty list when the key is missing."""

        raise NotImplementedError

    def set(self, key: str, items: List[dict]) -> None:
        raise NotImplementedError

    def lock(self, key: str) -> ContextManager[None]:
        raise NotImplementedError
