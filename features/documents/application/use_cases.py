"""PDF文書機能のユースケース"""
from __future__ import annotations

from pathlib import Path

from core.db import db
from core.logging_config import get_feature_logger, log_event_error, log_event_info
from features.documents.application.services import DocumentServices
from features.documents.domain.exceptions import (
    DocumentNotFoundError,
    DocumentValidationError,
)
from features.documents.domain.models import DocumentState, PdfDocument

from .dto import ReferenceOutput, UploadDocumentInput


DEFAULT_TITLE = "Untitled"


def _attach_reference(services: DocumentServices, document: PdfDocument) -> ReferenceOutput:
    """CREATED状態の文書に暗号化参照を付与する

    暗号化や保存に失敗してもレコードは変更せず、失敗内容を結果に含めて返す。
    """

    if document.state is DocumentState.REFERENCED:
        return ReferenceOutput(document=document)

    try:
        token = services.cipher.encrypt(str(document.id))
        referenced = services.document_store.set_reference(document.id, token)
    except Exception as exc:  # noqa: BLE001 - 参照付与の失敗は部分失敗として扱う
        db.session.rollback()
        log_event_error(
            get_feature_logger(__name__),
            "Failed to attach encrypted reference",
            "documents.reference.failed",
            document_id=document.id,
        )
        return ReferenceOutput(document=document, reference_error=type(exc).__name__)

    return ReferenceOutput(document=referenced)


class UploadDocumentUseCase:
    """PDFアップロードユースケース (createWithReference)

    1. ファイル保存とレコード作成 (CREATED)
    2. レコードIDを暗号化
    3. 参照トークンを保存 (REFERENCED)
    """

    def __init__(self, services: DocumentServices) -> None:
        self._services = services

    def execute(self, payload: UploadDocumentInput) -> ReferenceOutput:
        filename = (payload.file.filename or "").strip() if payload.file else ""
        if not filename:
            raise DocumentValidationError("No file uploaded")
        if not filename.lower().endswith(".pdf"):
            raise DocumentValidationError("PDFファイルのみアップロードできます")

        title = (payload.title or "").strip() or DEFAULT_TITLE
        stored_name = self._services.file_storage.save(payload.file)
        try:
            document = self._services.document_store.create(
                filename=stored_name,
                title=title,
                uploaded_by=payload.uploaded_by,
            )
        except Exception:
            db.session.rollback()
            self._services.file_storage.remove(stored_name)
            raise

        output = _attach_reference(self._services, document)
        log_event_info(
            get_feature_logger(__name__),
            "PDF uploaded",
            "documents.upload",
            document_id=document.id,
            state=output.state.value,
        )
        return output


class EnsureDocumentReferenceUseCase:
    """参照トークン未設定の文書に後から付与するユースケース"""

    def __init__(self, services: DocumentServices) -> None:
        self._services = services

    def execute(self, document_id: int) -> ReferenceOutput:
        document = self._services.document_store.get(document_id)
        return _attach_reference(self._services, document)


class ResolveDocumentReferenceUseCase:
    """QRから読み取った参照トークンを文書に解決するユースケース

    トークンが不正な場合は :class:`core.crypto.InvalidToken` を送出する。
    """

    def __init__(self, services: DocumentServices) -> None:
        self._services = services

    def execute(self, token: str) -> PdfDocument:
        plaintext = self._services.cipher.decrypt(token)
        try:
            document_id = int(plaintext)
        except ValueError:
            raise DocumentNotFoundError("指定されたPDFが見つかりません") from None
        return self._services.document_store.get(document_id)


class GetDocumentFileUseCase:
    """ダウンロード用に文書と実ファイルを取得するユースケース"""

    def __init__(self, services: DocumentServices) -> None:
        self._services = services

    def by_id(self, document_id: int) -> tuple[PdfDocument, Path]:
        document = self._services.document_store.get(document_id)
        return document, self._services.file_storage.resolve(document.filename)

    def by_filename(self, filename: str) -> Path:
        return self._services.file_storage.resolve(filename)


__all__ = [
    "EnsureDocumentReferenceUseCase",
    "GetDocumentFileUseCase",
    "ResolveDocumentReferenceUseCase",
    "UploadDocumentUseCase",
]
