from __future__ import annotations

from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role


def json_error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def admin_required(container):
    """Allow a logged-in admin session or a request carrying a valid X-API-Key."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if session.get("role") == Role.ADMIN.value:
                return view(*args, **kwargs)
            if container.auth_service.verify_api_key(request.headers.get("X-API-Key")):
                return view(*args, **kwargs)
            if "role" not in session:
                return json_error("Authentication required", 401)
            return json_error("Forbidden", 403)

        return wrapper

    return decorator


def api_key_required(container):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not container.auth_service.verify_api_key(request.headers.get("X-API-Key")):
                return json_error("Invalid API key", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def request_data() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
