"""PDF文書APIのルーティング"""
from __future__ import annotations

from http import HTTPStatus
from pathlib import Path
from typing import Any

from flask import jsonify, request, send_file, url_for
from flask_babel import gettext as _
from flask_login import current_user

from core.crypto import InvalidToken
from core.qr import qr_code_data_uri
from core.time import isoformat_utc
from features.documents.application.dto import ReferenceOutput, UploadDocumentInput
from features.documents.application.services import build_document_services
from features.documents.application.use_cases import (
    EnsureDocumentReferenceUseCase,
    GetDocumentFileUseCase,
    ResolveDocumentReferenceUseCase,
    UploadDocumentUseCase,
)
from features.documents.domain.exceptions import (
    DocumentFileMissingError,
    DocumentNotFoundError,
    DocumentValidationError,
)
from features.documents.domain.models import PdfDocument
from webapp.auth_guards import json_error, require_admin, require_login

from . import documents_api_bp


def _document_urls(document: PdfDocument) -> dict[str, str]:
    return {
        "pdfUrl": url_for("documents_api.download_by_filename", filename=document.filename, _external=True),
        "downloadUrl": url_for("documents_api.download_by_id", document_id=document.id, _external=True),
    }


def _serialize_document(document: PdfDocument) -> dict[str, Any]:
    return {
        "id": document.id,
        "title": document.title,
        "filename": document.filename,
        "uploadedBy": document.uploaded_by,
        "createdAt": isoformat_utc(document.created_at),
        "encryptedUrl": document.encrypted_reference,
        "state": document.state.value,
    }


def _reference_response(output: ReferenceOutput, *, created: bool):
    document = output.document
    body: dict[str, Any] = {"pdf": _serialize_document(document), **_document_urls(document)}
    if output.is_referenced:
        body["qrCodeData"] = qr_code_data_uri(document.encrypted_reference)
        status = HTTPStatus.CREATED if created else HTTPStatus.OK
    else:
        # レコードは存在するがQR経由ではまだ取得できない
        body["qrCodeData"] = None
        body["referencePending"] = True
        status = HTTPStatus.ACCEPTED
    return jsonify(body), status


def _send_pdf(path: Path, filename: str):
    inline = request.args.get("mode") == "inline"
    response = send_file(
        path,
        mimetype="application/pdf",
        as_attachment=not inline,
        download_name=filename,
        conditional=False,
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Cache-Control"] = "no-store"
    return response


@documents_api_bp.post("/pdf/upload")
def upload_pdf():
    error = require_admin()
    if error:
        return error

    upload = request.files.get("pdf")
    if upload is None or not upload.filename:
        return json_error(_("No file uploaded"), HTTPStatus.BAD_REQUEST)

    use_case = UploadDocumentUseCase(build_document_services())
    try:
        output = use_case.execute(
            UploadDocumentInput(
                file=upload,
                title=request.form.get("title"),
                uploaded_by=current_user.id,
            )
        )
    except DocumentValidationError as exc:
        return json_error(str(exc), HTTPStatus.BAD_REQUEST)

    return _reference_response(output, created=True)


@documents_api_bp.post("/pdf/<int:document_id>/reference")
def ensure_pdf_reference(document_id: int):
    error = require_admin()
    if error:
        return error

    try:
        output = EnsureDocumentReferenceUseCase(build_document_services()).execute(document_id)
    except DocumentNotFoundError:
        return json_error(_("PDF not found"), HTTPStatus.NOT_FOUND)

    return _reference_response(output, created=False)


@documents_api_bp.get("/pdf/by-id/<int:document_id>")
def download_by_id(document_id: int):
    error = require_login()
    if error:
        return error

    try:
        document, path = GetDocumentFileUseCase(build_document_services()).by_id(document_id)
    except DocumentNotFoundError:
        return json_error(_("PDF not found"), HTTPStatus.NOT_FOUND)
    except DocumentFileMissingError:
        return json_error(_("File not found"), HTTPStatus.NOT_FOUND)

    return _send_pdf(path, document.filename)


@documents_api_bp.get("/pdf/<path:filename>")
def download_by_filename(filename: str):
    error = require_login()
    if error:
        return error

    try:
        path = GetDocumentFileUseCase(build_document_services()).by_filename(filename)
    except DocumentFileMissingError:
        return json_error(_("File not found"), HTTPStatus.NOT_FOUND)

    return _send_pdf(path, filename)


@documents_api_bp.post("/pdf/decrypt")
def decrypt_reference():
    error = require_login()
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    encrypted = payload.get("encrypted")
    if not encrypted or not isinstance(encrypted, str):
        return json_error(_("No encrypted data provided"), HTTPStatus.BAD_REQUEST)

    try:
        document = ResolveDocumentReferenceUseCase(build_document_services()).execute(encrypted)
    except InvalidToken:
        return json_error(_("Invalid encrypted string"), HTTPStatus.BAD_REQUEST)
    except DocumentNotFoundError:
        return json_error(_("PDF not found"), HTTPStatus.NOT_FOUND)

    return jsonify(_document_urls(document))
