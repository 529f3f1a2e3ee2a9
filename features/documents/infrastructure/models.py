from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from core.db import db
from core.models.user import BigInt
from core.time import utc_now_naive


class PdfDocumentEntity(db.Model):
    """アップロード済みPDFを保持するテーブル"""

    __tablename__ = "pdf_documents"

    id: Mapped[int] = mapped_column(BigInt, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    filename: Mapped[str] = mapped_column(db.String(255), nullable=False, unique=True)
    # 作成後に id を暗号化して設定する
    encrypted_reference: Mapped[str | None] = mapped_column(db.String(512), nullable=True)
    uploaded_by: Mapped[int | None] = mapped_column(
        BigInt,
        db.ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime,
        nullable=False,
        default=utc_now_naive,
    )


__all__ = ["PdfDocumentEntity"]
