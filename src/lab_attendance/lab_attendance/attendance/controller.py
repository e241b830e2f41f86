from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, json_error, request_data
from ..core.exceptions import StoreError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = admin_required(container)

    def _kiosk(action):
        ufid = str(request_data().get("ufid", ""))
        try:
            event = action(ufid)
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to record attendance. Please try again.", 503)
        return jsonify(
            {
                "success": True,
                "record": event.to_dict(),
                "studentName": event.name,
            }
        )

    @app.route("/api/attendance/signin", methods=["POST"], endpoint="kiosk_signin")
    def kiosk_signin():
        return _kiosk(container.attendance_service.sign_in)

    @app.route("/api/attendance/signout", methods=["POST"], endpoint="kiosk_signout")
    def kiosk_signout():
        return _kiosk(container.attendance_service.sign_out)

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance")
    @admin_only
    def admin_attendance():
        try:
            day = parse_iso_date(request.args["date"]) if request.args.get("date") else None
        except ValueError:
            return json_error("Invalid date (YYYY-MM-DD)", 400)
        try:
            data = container.attendance_service.list_events(
                page=request.args.get("page", 1),
                page_size=request.args.get("pageSize", 50),
                search=request.args.get("search", ""),
                day=day,
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to get attendance", 503)

        return jsonify(
            {
                "success": True,
                "attendance": [e.to_dict() for e in data["events"]],
                "pagination": {
                    "page": data["page"],
                    "pageSize": data["page_size"],
                    "total": data["total"],
                },
            }
        )

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_only
    def admin_stats():
        try:
            stats = container.attendance_service.dashboard_stats(
                pending_records=container.pending_repo.list_all(),
            )
        except StoreError:
            return json_error("Failed to get statistics", 503)
        return jsonify({"success": True, "stats": stats})
