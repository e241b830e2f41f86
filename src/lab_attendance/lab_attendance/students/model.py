from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_instant, parse_optional_instant


@dataclass(frozen=True)
class Student:
    """Registered lab member allowed to sign in."""

    ufid: str
    name: str
    email: str = ""
    active: bool = True
    added_date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Student":
        return cls(
            ufid=str(data["ufid"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            active=data.get("active") is not False,
            added_date=parse_optional_instant(data.get("addedDate")),
        )

    def to_dict(self) -> dict:
        return {
            "ufid": self.ufid,
            "name": self.name,
            "email": self.email,
            "active": self.active,
            "addedDate": format_instant(self.added_date) if self.added_date else None,
        }
