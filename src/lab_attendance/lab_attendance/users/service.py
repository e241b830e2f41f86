from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    username: str
    role: Role


class AuthService:
    """Use case: authenticate the lab admin (login) or a sync client (API key)."""

    def __init__(self, *, admin_username: str, admin_password_hash: str, api_key: Optional[str] = None):
        self._admin_username = admin_username
        self._admin_password_hash = admin_password_hash
        self._api_key = api_key

    def authenticate(self, username: str, password: str) -> SessionUser:
        if not self._admin_username or not self._admin_password_hash:
            raise AuthenticationError("Admin credentials not configured")
        if (username or "").strip() != self._admin_username:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(self._admin_password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")
        return SessionUser(username=self._admin_username, role=Role.ADMIN)

    def verify_api_key(self, value: Optional[str]) -> bool:
        if not self._api_key or not value:
            return False
        return hmac.compare_digest(self._api_key, value)
