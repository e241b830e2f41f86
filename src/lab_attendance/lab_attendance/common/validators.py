from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_UFID_RE = re.compile(r"^\d{8}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_ufid(value: str) -> str:
    v = (value or "").strip()
    if not _UFID_RE.match(v):
        raise ValidationError("UFID must be exactly 8 digits")
    return v


def clamp_page(page, page_size, *, default_size: int, max_size: int) -> tuple[int, int]:
    try:
        p = int(page or 1)
        s = int(page_size or default_size)
    except (TypeError, ValueError):
        raise ValidationError("Invalid pagination parameters")
    return max(p, 1), min(max(s, 1), max_size)
