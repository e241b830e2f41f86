from __future__ import annotations

import logging
from datetime import datetime

from flask import Flask, jsonify, render_template, request

from ..common.datetime_utils import local_date, now_utc, parse_instant, parse_iso_date, to_utc
from ..common.web import admin_required, api_key_required, json_error, request_data
from ..core.exceptions import (
    AlreadyResolvedError,
    CrossDayError,
    DeadlineExpiredError,
    InvalidTimeError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from ..container import Container
from .model import PendingSignout

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred while processing your submission. Please try again."


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    admin_only = admin_required(container)
    sync_only = api_key_required(container)

    def _local(value: datetime, fmt: str) -> str:
        return to_utc(value).astimezone(container.tz).strftime(fmt)

    app.jinja_env.filters["local_datetime"] = lambda v: _local(v, "%A, %B %d, %Y %I:%M %p")
    app.jinja_env.filters["local_time"] = lambda v: _local(v, "%I:%M %p")
    app.jinja_env.filters["local_clock"] = lambda v: _local(v, "%H:%M")

    def _error_page(message: str, status: int):
        return render_template("signout/error.html", message=message), status

    def _form_page(record: PendingSignout, error: str | None = None, status: int = 200):
        return render_template("signout/form.html", record=record, error=error), status

    def _record_json(record: PendingSignout, now: datetime) -> dict:
        data = record.to_dict()
        data["effectiveStatus"] = record.effective_status(now).value
        data["hoursWorked"] = round(record.hours_worked, 2) if record.hours_worked is not None else None
        return data

    # -------- Student-facing form --------
    @app.route("/signout/<token>", methods=["GET"], endpoint="signout_form")
    def signout_form(token: str):
        try:
            record = container.pending_service.check_form_access(token)
        except NotFoundError as e:
            return _error_page(str(e), 404)
        except (AlreadyResolvedError, DeadlineExpiredError) as e:
            return _error_page(str(e), 400)
        except StoreError:
            return _error_page("An error occurred. Please try again.", 500)
        return _form_page(record)

    @app.route("/signout/<token>", methods=["POST"], endpoint="signout_submit")
    def signout_submit(token: str):
        try:
            resolution = container.pending_service.resolve_by_student(token, request.form.get("signOutTime"))
        except NotFoundError as e:
            return _error_page(str(e), 404)
        except (AlreadyResolvedError, DeadlineExpiredError) as e:
            return _error_page(str(e), 400)
        except (InvalidTimeError, CrossDayError) as e:
            try:
                record = container.pending_service.lookup_by_token(token)
            except (NotFoundError, StoreError):
                return _error_page(GENERIC_ERROR, 500)
            return _form_page(record, error=str(e), status=400)
        except StoreError:
            return _error_page(GENERIC_ERROR, 500)

        return render_template(
            "signout/success.html",
            record=resolution.record,
            hours=resolution.hours_display,
        )

    # -------- Sync client --------
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "service": "pending-signout-api"})

    @app.route("/api/pending", methods=["POST"], endpoint="create_pending")
    @sync_only
    def create_pending():
        data = request_data()
        if not data.get("ufid") or not data.get("signInTimestamp"):
            return json_error("Missing required fields", 400)
        try:
            record = container.pending_service.create(
                ufid=str(data["ufid"]),
                name=str(data.get("name") or ""),
                email=str(data.get("email") or ""),
                sign_in_timestamp=parse_instant(data["signInTimestamp"]),
                deadline=parse_instant(data["deadline"]) if data.get("deadline") else None,
                record_id=str(data["id"]) if data.get("id") else None,
                token=data.get("token") or None,
                sign_in_record_id=str(data["signInRecordId"]) if data.get("signInRecordId") else None,
            )
        except ValueError:
            return json_error("Invalid timestamp", 400)
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to save pending sign-out", 503)
        return jsonify({"success": True, "record": record.to_dict()})

    # -------- Admin dashboard --------
    @app.route("/api/admin/pending", methods=["GET"], endpoint="admin_list_pending")
    @admin_only
    def admin_list_pending():
        now = now_utc()
        try:
            data = container.pending_service.list_pending(now=now)
        except StoreError:
            return json_error("Failed to get pending sign-outs", 503)
        return jsonify(
            {
                "success": True,
                "pending": [_record_json(p, now) for p in data["records"]],
                "stats": data["stats"],
            }
        )

    @app.route("/api/admin/pending/<record_id>", methods=["PUT"], endpoint="admin_resolve_pending")
    @admin_only
    def admin_resolve_pending(record_id: str):
        data = request_data()
        try:
            resolution = container.pending_service.resolve_by_admin(
                record_id,
                sign_out_time=data.get("signOutTime"),
                present_only=_as_bool(data.get("presentOnly")),
            )
        except NotFoundError as e:
            return json_error(str(e), 404)
        except AlreadyResolvedError as e:
            return json_error(str(e), 409)
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to resolve pending sign-out", 503)
        return jsonify(
            {
                "success": True,
                "record": _record_json(resolution.record, now_utc()),
                "hoursWorked": round(resolution.hours_worked, 2),
            }
        )

    @app.route("/api/admin/pending/open-sessions", methods=["POST"], endpoint="admin_open_pending")
    @admin_only
    def admin_open_pending():
        data = request_data()
        try:
            day = parse_iso_date(data["date"]) if data.get("date") else local_date(now_utc(), container.tz)
        except ValueError:
            return json_error("Invalid date (YYYY-MM-DD)", 400)
        try:
            created = container.pending_service.create_for_open_sessions(day)
        except StoreError:
            return json_error("Failed to open pending sign-outs", 503)
        return jsonify({"success": True, "created": [p.to_dict() for p in created]})

    @app.route("/api/admin/pending/cleanup", methods=["DELETE"], endpoint="admin_cleanup_pending")
    @admin_only
    def admin_cleanup_pending():
        try:
            max_age = int(request.args.get("maxAgeDays", container.cleanup_max_age_days))
            removed = container.pending_service.cleanup(max_age_days=max_age)
        except (TypeError, ValueError, ValidationError):
            return json_error("Invalid maxAgeDays", 400)
        except StoreError:
            return json_error("Failed to clean up pending sign-outs", 503)
        return jsonify({"success": True, "removed": removed})
