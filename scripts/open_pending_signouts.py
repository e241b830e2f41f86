"""End-of-day job: open a pending sign-out for every session left open.

Usage: python scripts/open_pending_signouts.py [YYYY-MM-DD]
Defaults to today's date in the reference timezone.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.lab_attendance.lab_attendance.common.datetime_utils import local_date, now_utc, parse_iso_date
from src.lab_attendance.lab_attendance.container import build_container
from src.lab_attendance.lab_attendance.main import configure_logging


def main(argv: list[str]) -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(settings)

    day = parse_iso_date(argv[0]) if argv else local_date(now_utc(), container.tz)
    created = container.pending_service.create_for_open_sessions(day)
    for record in created:
        print(f"{record.ufid}\t{record.name}\t/signout/{record.token}")
    print(f"OK: {len(created)} pending sign-out(s) opened for {day.isoformat()}")


if __name__ == "__main__":
    main(sys.argv[1:])
