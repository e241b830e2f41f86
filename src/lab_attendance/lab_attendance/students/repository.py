from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from ..core.constants import STUDENTS_KEY
from ..core.exceptions import DuplicateError
from ..store.repository import RecordStore
from .model import Student


class StudentRepository(Protocol):
    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_ufid(self, ufid: str) -> Optional[Student]:
        raise NotImplementedError

    def add(self, student: Student) -> None:
        raise NotImplementedError

    def replace(self, student: Student) -> bool:
        raise NotImplementedError

    def remove(self, ufid: str) -> bool:
        raise NotImplementedError


class StoreStudentRepository(StudentRepository):
    def __init__(self, store: RecordStore):
        self._store = store

    def _load(self) -> List[Student]:
        return [Student.from_dict(d) for d in self._store.get(STUDENTS_KEY)]

    def _save(self, students: List[Student]) -> None:
        self._store.set(STUDENTS_KEY, [s.to_dict() for s in students])

    def list_all(self) -> Sequence[Student]:
        return self._load()

    def get_by_ufid(self, ufid: str) -> Optional[Student]:
        return next((s for s in self._load() if s.ufid == ufid), None)

    def add(self, student: Student) -> None:
        with self._store.lock(STUDENTS_KEY):
            students = self._load()
            if any(s.ufid == student.ufid for s in students):
                raise DuplicateError(f"Student {student.ufid} already exists")
            students.append(student)
            self._save(students)

    def replace(self, student: Student) -> bool:
        with self._store.lock(STUDENTS_KEY):
            students = self._load()
            for i, s in enumerate(students):
                if s.ufid == student.ufid:
                    students[i] = student
                    self._save(students)
                    return True
            return False

    def remove(self, ufid: str) -> bool:
        with self._store.lock(STUDENTS_KEY):
            students = self._load()
            kept = [s for s in students if s.ufid != ufid]
            if len(kept) == len(students):
                return False
            self._save(kept)
            return True
