from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from core.db import db
from core.models.user import BigInt
from core.time import utc_now_naive


class FingerprintEntity(db.Model):
    """利用者に紐づく指紋データのダイジェスト"""

    __tablename__ = "fingerprints"
    __table_args__ = (
        db.UniqueConstraint("user_id", "data_digest", name="uq_fingerprints_user_data"),
    )

    id: Mapped[int] = mapped_column(BigInt, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInt,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    data_digest: Mapped[str] = mapped_column(db.String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime,
        nullable=False,
        default=utc_now_naive,
    )


__all__ = ["FingerprintEntity"]
