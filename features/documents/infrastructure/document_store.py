"""PDF文書レコードの永続化ストア"""
from __future__ import annotations

from core.db import db
from features.documents.domain.exceptions import DocumentNotFoundError
from features.documents.domain.models import PdfDocument

from .models import PdfDocumentEntity


class PdfDocumentStore:
    """SQLAlchemyを利用したPDF文書ストア"""

    def create(self, *, filename: str, title: str, uploaded_by: int | None) -> PdfDocument:
        """参照トークン未設定のレコードを作成する"""

        entity = PdfDocumentEntity(filename=filename, title=title, uploaded_by=uploaded_by)
        db.session.add(entity)
        db.session.commit()
        return self._entity_to_domain(entity)

    def set_reference(self, document_id: int, token: str) -> PdfDocument:
        """未設定の場合のみ参照トークンを保存する

        既に設定済みのレコードは上書きしない。
        """

        (
            db.session.query(PdfDocumentEntity)
            .filter(
                PdfDocumentEntity.id == document_id,
                PdfDocumentEntity.encrypted_reference.is_(None),
            )
            .update(
                {PdfDocumentEntity.encrypted_reference: token},
                synchronize_session=False,
            )
        )
        db.session.commit()
        return self.get(document_id)

    def find(self, document_id: int) -> PdfDocument | None:
        entity = db.session.get(PdfDocumentEntity, document_id, populate_existing=True)
        return self._entity_to_domain(entity) if entity else None

    def get(self, document_id: int) -> PdfDocument:
        document = self.find(document_id)
        if document is None:
            raise DocumentNotFoundError("指定されたPDFが見つかりません")
        return document

    def list_unreferenced(self) -> list[PdfDocument]:
        query = PdfDocumentEntity.query.filter(
            PdfDocumentEntity.encrypted_reference.is_(None)
        ).order_by(PdfDocumentEntity.created_at.asc())
        return [self._entity_to_domain(entity) for entity in query.all()]

    def _entity_to_domain(self, entity: PdfDocumentEntity) -> PdfDocument:
        return PdfDocument(
            id=entity.id,
            filename=entity.filename,
            title=entity.title,
            uploaded_by=entity.uploaded_by,
            created_at=entity.created_at,
            encrypted_reference=entity.encrypted_reference,
        )


__all__ = ["PdfDocumentStore"]
