"""指紋データの永続化ストア"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from core.db import db
from core.models.user import User
from features.fingerprints.domain.exceptions import FingerprintAlreadyEnrolledError
from features.fingerprints.domain.models import EnrolledFingerprint, fingerprint_digest

from .models import FingerprintEntity


class FingerprintStore:
    """SQLAlchemyを利用した指紋ストア"""

    def user_exists(self, user_id: int) -> bool:
        return db.session.get(User, user_id) is not None

    def exists(self, user_id: int, data: str) -> bool:
        return (
            db.session.query(FingerprintEntity.id)
            .filter(
                FingerprintEntity.user_id == user_id,
                FingerprintEntity.data_digest == fingerprint_digest(data),
            )
            .first()
            is not None
        )

    def create(self, user_id: int, data: str) -> EnrolledFingerprint:
        """指紋を登録する

        (user_id, data) の一意制約違反は :class:`FingerprintAlreadyEnrolledError` として通知する。
        """

        entity = FingerprintEntity(user_id=user_id, data_digest=fingerprint_digest(data))
        db.session.add(entity)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if self.exists(user_id, data):
                raise FingerprintAlreadyEnrolledError("指紋は登録済みです") from exc
            raise
        return self._entity_to_domain(entity)

    def _entity_to_domain(self, entity: FingerprintEntity) -> EnrolledFingerprint:
        return EnrolledFingerprint(
            id=entity.id,
            user_id=entity.user_id,
            created_at=entity.created_at,
        )


__all__ = ["FingerprintStore"]
