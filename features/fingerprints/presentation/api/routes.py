"""指紋照合APIのルーティング"""
from __future__ import annotations

from http import HTTPStatus

from flask import jsonify, request
from flask_babel import gettext as _

from features.fingerprints.application.dto import FingerprintInput
from features.fingerprints.application.use_cases import (
    EnrollFingerprintUseCase,
    VerifyFingerprintUseCase,
)
from features.fingerprints.domain.exceptions import (
    FingerprintAlreadyEnrolledError,
    FingerprintUserNotFoundError,
    FingerprintValidationError,
)
from webapp.auth_guards import json_error, require_admin, require_login

from . import fingerprints_api_bp


def _read_payload():
    """(FingerprintInput, None) または (None, エラー応答) を返す"""

    payload = request.get_json(silent=True) or {}
    raw_user_id = payload.get("userId")
    data = payload.get("data")
    if raw_user_id in (None, "") or not data:
        return None, json_error(_("Missing userId or data"), HTTPStatus.BAD_REQUEST)
    if isinstance(raw_user_id, bool):
        return None, json_error(_("Invalid userId"), HTTPStatus.BAD_REQUEST)
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError):
        return None, json_error(_("Invalid userId"), HTTPStatus.BAD_REQUEST)
    if not isinstance(data, str):
        return None, json_error(_("Invalid data"), HTTPStatus.BAD_REQUEST)
    return FingerprintInput(user_id=user_id, data=data), None


@fingerprints_api_bp.post("/fingerprint/enroll")
def enroll_fingerprint():
    error = require_admin()
    if error:
        return error

    payload, error = _read_payload()
    if error:
        return error

    try:
        fingerprint = EnrollFingerprintUseCase().execute(payload)
    except FingerprintValidationError as exc:
        return json_error(str(exc), HTTPStatus.BAD_REQUEST)
    except FingerprintUserNotFoundError:
        return json_error(_("User not found"), HTTPStatus.NOT_FOUND)
    except FingerprintAlreadyEnrolledError:
        return json_error(_("Fingerprint already enrolled"), HTTPStatus.CONFLICT)

    return (
        jsonify({"message": _("Fingerprint enrolled"), "fingerprintId": fingerprint.id}),
        HTTPStatus.CREATED,
    )


@fingerprints_api_bp.post("/fingerprint/verify")
def verify_fingerprint():
    error = require_login()
    if error:
        return error

    payload, error = _read_payload()
    if error:
        return error

    try:
        matched = VerifyFingerprintUseCase().execute(payload)
    except FingerprintValidationError as exc:
        return json_error(str(exc), HTTPStatus.BAD_REQUEST)

    return jsonify(
        {
            "message": _("Fingerprint verified") if matched else _("Fingerprint does not match"),
            "match": matched,
        }
    )
