"""Access guards shared by the JSON API blueprints.

Each guard returns ``None`` when the request may proceed, otherwise a JSON
error response tuple that the view returns as-is.
"""
from __future__ import annotations

from http import HTTPStatus

from flask import jsonify
from flask_babel import gettext as _
from flask_login import current_user

from core.models.user import UserRole


def json_error(message: str, status: HTTPStatus):
    return jsonify({"error": message}), status


def require_login():
    if not current_user.is_authenticated:
        return json_error(_("Authentication required"), HTTPStatus.UNAUTHORIZED)
    return None


def require_admin():
    error = require_login()
    if error:
        return error
    if not current_user.has_role(UserRole.ADMIN):
        return json_error(_("Admin access required"), HTTPStatus.FORBIDDEN)
    return None


def resolve_actor() -> str:
    if not current_user.is_authenticated:
        return "system"
    return f"user:{current_user.id}"


__all__ = ["json_error", "require_admin", "require_login", "resolve_actor"]
