from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored in the Flask session."""

    ADMIN = "admin"


class AttendanceAction(str, Enum):
    SIGNIN = "signin"
    SIGNOUT = "signout"


class PendingStatus(str, Enum):
    """Lifecycle of a pending sign-out record.

    EXPIRED is accepted when loading stored data but never written: expiry is
    evaluated against the deadline at read time.
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    EXPIRED = "expired"


class ResolvedBy(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"
