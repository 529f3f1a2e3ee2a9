"""試験結果の永続化ストア"""
from __future__ import annotations

from core.db import db
from core.models.user import User
from features.certificates.domain.exceptions import (
    ExamResultNotFoundError,
    UserNotFoundError,
)
from features.certificates.domain.models import CertificateHolder, ExamResult

from .models import ExamResultEntity


def exam_result_to_domain(entity: ExamResultEntity) -> ExamResult:
    return ExamResult(
        id=entity.id,
        user_id=entity.user_id,
        exam_name=entity.exam_name,
        year=entity.year,
        scores=dict(entity.scores or {}),
        created_at=entity.created_at,
    )


class ExamResultStore:
    """SQLAlchemyを利用した試験結果ストア"""

    def create(self, *, user_id: int, exam_name: str, year: int, scores: dict[str, float]) -> ExamResult:
        entity = ExamResultEntity(
            user_id=user_id,
            exam_name=exam_name,
            year=year,
            scores=scores,
        )
        db.session.add(entity)
        db.session.commit()
        return exam_result_to_domain(entity)

    def get(self, exam_result_id: int) -> ExamResult:
        entity = db.session.get(ExamResultEntity, exam_result_id)
        if entity is None:
            raise ExamResultNotFoundError("指定された試験結果が見つかりません")
        return exam_result_to_domain(entity)

    def list_for_user(self, user_id: int) -> list[ExamResult]:
        query = ExamResultEntity.query.filter_by(user_id=user_id).order_by(
            ExamResultEntity.year.desc(),
            ExamResultEntity.created_at.desc(),
        )
        return [exam_result_to_domain(entity) for entity in query.all()]


class UserDirectory:
    """証明書発行時に参照する利用者情報"""

    def get(self, user_id: int) -> CertificateHolder:
        user = db.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError("指定された利用者が見つかりません")
        return CertificateHolder(id=user.id, name=user.name, email=user.email, role=user.role)


__all__ = ["ExamResultStore", "UserDirectory", "exam_result_to_domain"]
