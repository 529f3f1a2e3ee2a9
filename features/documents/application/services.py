"""PDF文書機能で利用する共通サービス定義"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flask import current_app

from core.crypto import ReferenceCipher
from features.documents.infrastructure.document_store import PdfDocumentStore
from features.documents.infrastructure.file_storage import PdfFileStorage

if TYPE_CHECKING:  # pragma: no cover
    from flask import Flask


REFERENCE_CIPHER_EXTENSION = "reference_cipher"


@dataclass(slots=True)
class DocumentServices:
    document_store: PdfDocumentStore
    file_storage: PdfFileStorage
    cipher: ReferenceCipher


def build_document_services(app: "Flask | None" = None) -> DocumentServices:
    """アプリケーションに登録された暗号器と保存先からサービスを組み立てる"""

    app = app or current_app._get_current_object()
    return DocumentServices(
        document_store=PdfDocumentStore(),
        file_storage=PdfFileStorage(app.config["UPLOAD_DIRECTORY"]),
        cipher=app.extensions[REFERENCE_CIPHER_EXTENSION],
    )


__all__ = ["DocumentServices", "REFERENCE_CIPHER_EXTENSION", "build_document_services"]
