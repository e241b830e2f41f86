from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, json_error, request_data
from ..core.exceptions import NotFoundError, StoreError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = admin_required(container)

    @app.route("/api/admin/students", methods=["GET"], endpoint="admin_students")
    @admin_only
    def admin_students():
        try:
            data = container.student_service.list_students(
                page=request.args.get("page", 1),
                page_size=request.args.get("pageSize", 50),
                search=request.args.get("search", ""),
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to get students", 503)
        return jsonify(
            {
                "success": True,
                "students": [s.to_dict() for s in data["students"]],
                "pagination": {
                    "page": data["page"],
                    "pageSize": data["page_size"],
                    "total": data["total"],
                },
            }
        )

    @app.route("/api/admin/students", methods=["POST"], endpoint="admin_add_student")
    @admin_only
    def admin_add_student():
        data = request_data()
        try:
            student = container.student_service.add_student(
                ufid=str(data.get("ufid", "")),
                name=str(data.get("name") or ""),
                email=str(data.get("email") or ""),
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to add student", 503)
        return jsonify({"success": True, "student": student.to_dict()}), 201

    @app.route("/api/admin/students/<ufid>", methods=["PUT"], endpoint="admin_update_student")
    @admin_only
    def admin_update_student(ufid: str):
        data = request_data()
        try:
            student = container.student_service.update_student(
                ufid,
                name=data.get("name"),
                email=data.get("email"),
                active=data.get("active"),
            )
        except NotFoundError as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        except StoreError:
            return json_error("Failed to update student", 503)
        return jsonify({"success": True, "student": student.to_dict()})

    @app.route("/api/admin/students/<ufid>", methods=["DELETE"], endpoint="admin_remove_student")
    @admin_only
    def admin_remove_student(ufid: str):
        try:
            container.student_service.remove_student(ufid)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except StoreError:
            return json_error("Failed to remove student", 503)
        return jsonify({"success": True})
