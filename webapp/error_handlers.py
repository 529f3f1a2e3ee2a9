"""Centralized HTTP error handling for the JSON API."""
import json

from flask import current_app, g, jsonify, request
from flask_babel import gettext as _
from werkzeug.exceptions import HTTPException

from .logging_utils import mask_sensitive_data


def _request_summary(code: int) -> dict:
    try:
        input_json = request.get_json(silent=True)
    except Exception:
        input_json = None

    log_dict = {
        "method": request.method,
        "path": request.path,
        "ua": request.user_agent.string,
        "status": code,
    }
    qs = request.query_string.decode()
    if qs:
        log_dict["query_string"] = qs
    form_dict = request.form.to_dict()
    if form_dict:
        log_dict["form"] = mask_sensitive_data(form_dict)
    if input_json is not None:
        log_dict["json"] = mask_sensitive_data(input_json)
    return log_dict


def register_error_handlers(app):
    """Register global error handlers returning JSON payloads.

    5xx responses never carry exception details; those go to the log only.
    """

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        code = error.code or 500
        log_dict = _request_summary(code)
        extra = {"event": "api.http_4xx" if code < 500 else "api.http_5xx",
                 "request_id": getattr(g, "request_id", None)}
        if code < 500:
            app.logger.warning(json.dumps(log_dict, ensure_ascii=False), extra=extra)
            message = _(error.name) if error.name else _("Error")
        else:
            app.logger.error(json.dumps(log_dict, ensure_ascii=False), extra=extra)
            message = _("Internal Server Error")
        g.exception_logged = True
        return jsonify({"error": "error", "code": code, "message": message}), code

    @app.errorhandler(Exception)
    def handle_exception(error):
        log_dict = _request_summary(500)
        current_app.logger.exception(
            json.dumps(log_dict, ensure_ascii=False),
            extra={"event": "api.http_5xx", "request_id": getattr(g, "request_id", None)},
        )
        g.exception_logged = True
        return jsonify({"error": "error", "code": 500, "message": _("Internal Server Error")}), 500
