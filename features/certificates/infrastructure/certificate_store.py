"""発行済み証明書の永続化ストア"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from core.db import db
from features.certificates.domain.exceptions import (
    CertificateIdCollisionError,
    CertificateNotFoundError,
)
from features.certificates.domain.models import (
    CertificateHolder,
    CertificateRecord,
    CertificateView,
)

from .exam_result_store import exam_result_to_domain
from .models import CertificateEntity


class CertificateStore:
    """SQLAlchemyを利用した証明書ストア"""

    def create(self, record: CertificateRecord) -> CertificateRecord:
        """証明書を新規作成する

        証明書IDの一意制約違反は :class:`CertificateIdCollisionError` として通知する。
        """

        entity = CertificateEntity(
            certificate_id=record.certificate_id,
            user_id=record.user_id,
            exam_result_id=record.exam_result_id,
            issued_at=record.issued_at,
            revoked=record.revoked,
        )
        db.session.add(entity)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if self.exists(record.certificate_id):
                raise CertificateIdCollisionError(record.certificate_id) from exc
            raise
        return self._entity_to_domain(entity)

    def exists(self, certificate_id: str) -> bool:
        return (
            db.session.query(CertificateEntity.id)
            .filter(CertificateEntity.certificate_id == certificate_id)
            .first()
            is not None
        )

    def find_by_certificate_id(self, certificate_id: str) -> CertificateRecord | None:
        entity = self._find_entity(certificate_id)
        return self._entity_to_domain(entity) if entity else None

    def get_view(self, certificate_id: str) -> CertificateView:
        """所有者と試験結果を含めた証明書情報を取得する"""

        entity = self._find_entity(certificate_id)
        if entity is None:
            raise CertificateNotFoundError("指定された証明書が見つかりません")
        return self._entity_to_view(entity)

    def list_for_user(self, user_id: int) -> list[CertificateView]:
        query = (
            CertificateEntity.query.filter_by(user_id=user_id)
            .order_by(CertificateEntity.issued_at.desc())
        )
        return [self._entity_to_view(entity) for entity in query.all()]

    def revoke(self, certificate_id: str) -> CertificateRecord:
        """証明書を失効させる"""

        entity = self._find_entity(certificate_id)
        if entity is None:
            raise CertificateNotFoundError("指定された証明書が見つかりません")
        entity.revoked = True
        db.session.commit()
        return self._entity_to_domain(entity)

    def _find_entity(self, certificate_id: str) -> CertificateEntity | None:
        return CertificateEntity.query.filter_by(certificate_id=certificate_id).first()

    def _entity_to_domain(self, entity: CertificateEntity) -> CertificateRecord:
        return CertificateRecord(
            id=entity.id,
            certificate_id=entity.certificate_id,
            user_id=entity.user_id,
            exam_result_id=entity.exam_result_id,
            issued_at=entity.issued_at,
            revoked=bool(entity.revoked),
        )

    def _entity_to_view(self, entity: CertificateEntity) -> CertificateView:
        holder = None
        if entity.user is not None:
            holder = CertificateHolder(
                id=entity.user.id,
                name=entity.user.name,
                email=entity.user.email,
                role=entity.user.role,
            )
        exam_result = None
        if entity.exam_result is not None:
            exam_result = exam_result_to_domain(entity.exam_result)
        return CertificateView(
            certificate=self._entity_to_domain(entity),
            holder=holder,
            exam_result=exam_result,
        )


__all__ = ["CertificateStore"]
