"""証明書・試験結果APIのルーティング"""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import current_app, jsonify, request
from flask_babel import gettext as _
from flask_login import current_user

from core.qr import qr_code_data_uri
from core.time import isoformat_utc
from features.certificates.application.dto import (
    IssueCertificateInput,
    UploadExamResultInput,
)
from features.certificates.application.use_cases import (
    IssueCertificateUseCase,
    ListStudentCertificatesUseCase,
    ListStudentExamResultsUseCase,
    RevokeCertificateUseCase,
    UploadExamResultUseCase,
    VerifyCertificateUseCase,
)
from features.certificates.domain.exceptions import (
    CertificateIssuanceError,
    CertificateNotFoundError,
    CertificateValidationError,
    ExamResultNotFoundError,
    UserNotFoundError,
)
from features.certificates.domain.models import CertificateHolder, CertificateView, ExamResult
from webapp.auth_guards import json_error, require_admin, require_login, resolve_actor

from . import certificates_api_bp


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _verification_url(certificate_id: str) -> str:
    base = current_app.config.get("FRONTEND_URL", "").rstrip("/")
    return f"{base}/verify-certificate/{certificate_id}"


def _serialize_holder(holder: CertificateHolder | None) -> dict[str, Any] | None:
    if holder is None:
        return None
    return {"id": holder.id, "name": holder.name, "email": holder.email}


def _serialize_exam_result(result: ExamResult | None) -> dict[str, Any] | None:
    if result is None:
        return None
    return {
        "id": result.id,
        "examName": result.exam_name,
        "year": result.year,
        "scores": result.scores,
        "average": result.average,
        "grade": result.grade,
        "createdAt": isoformat_utc(result.created_at),
    }


@certificates_api_bp.post("/results/upload")
def upload_exam_result():
    error = require_admin()
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    user_id = _parse_positive_int(payload.get("userId"))
    year = _parse_positive_int(payload.get("year"))
    if not payload.get("examName") or not payload.get("scores") or user_id is None or year is None:
        return json_error(_("Missing or invalid fields"), HTTPStatus.BAD_REQUEST)

    try:
        result = UploadExamResultUseCase().execute(
            UploadExamResultInput(
                user_id=user_id,
                exam_name=str(payload["examName"]),
                year=year,
                scores=payload["scores"],
            )
        )
    except CertificateValidationError as exc:
        return json_error(str(exc), HTTPStatus.BAD_REQUEST)
    except UserNotFoundError:
        return json_error(_("User not found"), HTTPStatus.NOT_FOUND)

    return (
        jsonify({"message": _("Exam result uploaded"), "examResultId": result.id}),
        HTTPStatus.CREATED,
    )


@certificates_api_bp.get("/results/my-results")
def list_my_exam_results():
    error = require_login()
    if error:
        return error

    results = ListStudentExamResultsUseCase().execute(current_user.id)
    return jsonify({"results": [_serialize_exam_result(item) for item in results]})


@certificates_api_bp.post("/certificates/generate")
def generate_certificate():
    error = require_admin()
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    raw_user_id = payload.get("userId")
    raw_exam_result_id = payload.get("examResultId")
    if raw_user_id in (None, "") or raw_exam_result_id in (None, ""):
        return json_error(_("Missing fields"), HTTPStatus.BAD_REQUEST)
    user_id = _parse_positive_int(raw_user_id)
    if user_id is None:
        return json_error(_("Invalid userId"), HTTPStatus.BAD_REQUEST)
    exam_result_id = _parse_positive_int(raw_exam_result_id)
    if exam_result_id is None:
        return json_error(_("Invalid examResultId"), HTTPStatus.BAD_REQUEST)

    use_case = IssueCertificateUseCase(
        max_attempts=current_app.config.get("CERTIFICATE_ID_MAX_ATTEMPTS", 5),
    )
    try:
        output = use_case.execute(
            IssueCertificateInput(user_id=user_id, exam_result_id=exam_result_id)
        )
    except UserNotFoundError:
        return json_error(_("User not found"), HTTPStatus.NOT_FOUND)
    except ExamResultNotFoundError:
        return json_error(_("Exam result not found"), HTTPStatus.NOT_FOUND)
    except CertificateValidationError as exc:
        return json_error(str(exc), HTTPStatus.BAD_REQUEST)
    except CertificateIssuanceError:
        current_app.logger.error(
            "Certificate issuance failed after retries",
            extra={"event": "certificates.issue.failed", "user_id": user_id},
        )
        return json_error(_("Server error"), HTTPStatus.INTERNAL_SERVER_ERROR)

    certificate = output.certificate
    verification_url = _verification_url(certificate.certificate_id)
    return (
        jsonify(
            {
                "message": _("Certificate generated successfully"),
                "certificate": {
                    "certificateId": certificate.certificate_id,
                    "issuedAt": isoformat_utc(certificate.issued_at),
                    "user": {"name": output.holder.name, "email": output.holder.email},
                    "exam": {
                        "examName": output.exam_result.exam_name,
                        "year": output.exam_result.year,
                        "scores": output.exam_result.scores,
                    },
                    "verificationUrl": verification_url,
                    "qrCode": qr_code_data_uri(verification_url),
                },
            }
        ),
        HTTPStatus.CREATED,
    )


@certificates_api_bp.get("/certificates/verify")
def verify_certificate():
    certificate_id = (request.args.get("certificateId") or "").strip()
    if not certificate_id:
        return json_error(_("certificateId required"), HTTPStatus.BAD_REQUEST)

    try:
        view = VerifyCertificateUseCase().execute(certificate_id)
    except CertificateNotFoundError:
        # 未発行と失効済みは同じ応答にする
        return json_error(_("Certificate not valid"), HTTPStatus.NOT_FOUND)

    return jsonify(_serialize_verification(view))


def _serialize_verification(view: CertificateView) -> dict[str, Any]:
    certificate = view.certificate
    return {
        "valid": True,
        "certificateId": certificate.certificate_id,
        "user": _serialize_holder(view.holder),
        "userId": certificate.user_id,
        "examResult": _serialize_exam_result(view.exam_result),
        "examResultId": certificate.exam_result_id,
        "issuedAt": isoformat_utc(certificate.issued_at),
        "revoked": certificate.revoked,
    }


@certificates_api_bp.get("/certificates/my-certificates")
def list_my_certificates():
    error = require_login()
    if error:
        return error

    views = ListStudentCertificatesUseCase().execute(current_user.id)
    payload = []
    for view in views:
        exam = view.exam_result
        payload.append(
            {
                "id": view.certificate.id,
                "certificateId": view.certificate.certificate_id,
                "examName": exam.exam_name if exam else None,
                "year": exam.year if exam else None,
                "issuedAt": isoformat_utc(view.certificate.issued_at),
                "revoked": view.certificate.revoked,
                "examResult": {
                    "scores": exam.scores if exam else {},
                    "average": exam.average if exam else 0,
                    "grade": exam.grade if exam else "F",
                },
                "verificationUrl": _verification_url(view.certificate.certificate_id),
            }
        )
    return jsonify(payload)


@certificates_api_bp.post("/certificates/<string:certificate_id>/revoke")
def revoke_certificate(certificate_id: str):
    error = require_admin()
    if error:
        return error

    try:
        record = RevokeCertificateUseCase().execute(certificate_id, actor=resolve_actor())
    except CertificateNotFoundError:
        return json_error(_("Certificate not found"), HTTPStatus.NOT_FOUND)

    return jsonify({"certificateId": record.certificate_id, "revoked": record.revoked})
