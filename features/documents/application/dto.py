"""PDF文書機能のDTO"""
from __future__ import annotations

from dataclasses import dataclass

from features.documents.domain.models import DocumentState, PdfDocument
from features.documents.infrastructure.file_storage import UploadedFile


@dataclass(slots=True)
class UploadDocumentInput:
    file: UploadedFile
    title: str | None
    uploaded_by: int | None


@dataclass(slots=True)
class ReferenceOutput:
    """参照トークン付与の結果

    ``reference_error`` が設定されている場合、レコードは ``CREATED`` のまま残る。
    """

    document: PdfDocument
    reference_error: str | None = None

    @property
    def state(self) -> DocumentState:
        return self.document.state

    @property
    def is_referenced(self) -> bool:
        return self.state is DocumentState.REFERENCED
