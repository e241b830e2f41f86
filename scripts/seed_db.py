from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.lab_attendance.lab_attendance.common.datetime_utils import format_instant, now_utc
from src.lab_attendance.lab_attendance.core.constants import ATTENDANCE_KEY, PENDING_KEY, STUDENTS_KEY
from src.lab_attendance.lab_attendance.database.bootstrap import apply_schema, seed_collection

DEMO_STUDENTS = [
    ("12345678", "Alex Demo", "alex.demo@example.edu"),
    ("23456789", "Sam Example", "sam.example@example.edu"),
]


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    added = format_instant(now_utc())
    students = [
        {"ufid": ufid, "name": name, "email": email, "active": True, "addedDate": added}
        for ufid, name, email in DEMO_STUDENTS
    ]
    wrote = seed_collection(db_config, key=STUDENTS_KEY, items=students)
    seed_collection(db_config, key=ATTENDANCE_KEY, items=[])
    seed_collection(db_config, key=PENDING_KEY, items=[])

    print(
        ("OK: Seeded demo students -> " if wrote else "SKIP: students already present -> ")
        + f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
