"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the pending sign-out workflow lives in services.
"""

import importlib

from config import get_settings_module

from src.lab_attendance.lab_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    data = container.pending_service.list_pending()
    print(data["stats"])
    for record in data["records"][:5]:
        print(record.ufid, record.name, record.status.value, record.deadline.isoformat())


if __name__ == "__main__":
    main()
