from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import db
from core.time import utc_now_naive
from core.models.user import BigInt, User


class ExamResultEntity(db.Model):
    """試験結果を保持するテーブル"""

    __tablename__ = "exam_results"
    __table_args__ = (
        db.Index("ix_exam_results_user_year_created", "user_id", "year", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInt, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInt,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    exam_name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    year: Mapped[int] = mapped_column(db.Integer, nullable=False)
    scores: Mapped[dict] = mapped_column(db.JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime,
        nullable=False,
        default=utc_now_naive,
    )

    user: Mapped[User] = relationship(User, lazy="joined")


class CertificateEntity(db.Model):
    """発行済み証明書を保持するテーブル"""

    __tablename__ = "certificates"

    id: Mapped[int] = mapped_column(BigInt, primary_key=True, autoincrement=True)
    certificate_id: Mapped[str] = mapped_column(
        db.String(32),
        nullable=False,
        unique=True,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        BigInt,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exam_result_id: Mapped[int] = mapped_column(
        BigInt,
        db.ForeignKey("exam_results.id", ondelete="CASCADE"),
        nullable=False,
    )
    issued_at: Mapped[datetime] = mapped_column(
        db.DateTime,
        nullable=False,
        default=utc_now_naive,
        index=True,
    )
    revoked: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)

    user: Mapped[User] = relationship(User, lazy="joined")
    exam_result: Mapped[ExamResultEntity] = relationship(ExamResultEntity, lazy="joined")


__all__ = ["CertificateEntity", "ExamResultEntity"]
