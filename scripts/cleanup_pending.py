from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.lab_attendance.lab_attendance.container import build_container
from src.lab_attendance.lab_attendance.main import configure_logging


def main(argv: list[str]) -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(settings)

    max_age = int(argv[0]) if argv else container.cleanup_max_age_days
    removed = container.pending_service.cleanup(max_age_days=max_age)
    print(f"OK: removed {removed} resolved pending record(s) older than {max_age} day(s)")


if __name__ == "__main__":
    main(sys.argv[1:])
