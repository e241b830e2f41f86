from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_utc
from ..common.validators import clamp_page, require_non_empty, require_ufid
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    def __init__(self, students: StudentRepository):
        self._students = students

    def get_student(self, ufid: str) -> Student:
        student = self._students.get_by_ufid(ufid)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def add_student(self, *, ufid: str, name: str, email: str = "", now: Optional[datetime] = None) -> Student:
        student = Student(
            ufid=require_ufid(ufid),
            name=require_non_empty(name, "Name"),
            email=(email or "").strip(),
            active=True,
            added_date=now or now_utc(),
        )
        try:
            self._students.add(student)
        except DuplicateError:
            raise ValidationError("A student with this UFID already exists")
        logger.info("Added student %s (%s)", student.name, student.ufid)
        return student

    def update_student(
        self,
        ufid: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Student:
        student = self.get_student(ufid)
        updated = replace(
            student,
            name=require_non_empty(name, "Name") if name is not None else student.name,
            email=email.strip() if email is not None else student.email,
            active=bool(active) if active is not None else student.active,
        )
        if not self._students.replace(updated):
            raise NotFoundError("Student not found")
        return updated

    def remove_student(self, ufid: str) -> None:
        if not self._students.remove(ufid):
            raise NotFoundError("Student not found")
        logger.info("Removed student %s", ufid)

    def list_students(self, *, page=1, page_size=DEFAULT_PAGE_SIZE, search: str = "") -> dict:
        page, page_size = clamp_page(page, page_size, default_size=DEFAULT_PAGE_SIZE, max_size=MAX_PAGE_SIZE)
        students = list(self._students.list_all())

        needle = (search or "").strip().lower()
        if needle:
            students = [
                s for s in students
                if needle in s.name.lower() or needle in s.ufid or needle in s.email.lower()
            ]

        start = (page - 1) * page_size
        return {
            "students": students[start:start + page_size],
            "total": len(students),
            "page": page,
            "page_size": page_size,
        }
