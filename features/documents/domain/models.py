"""PDF文書機能で利用するドメインモデル"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DocumentState(str, Enum):
    """暗号化参照の付与状態

    ``CREATED`` はレコード作成直後で暗号化参照が未設定の状態、
    ``REFERENCED`` は参照トークンが保存済みでQR経由で取得可能な状態。
    """

    CREATED = "created"
    REFERENCED = "referenced"


@dataclass(slots=True)
class PdfDocument:
    """アップロード済みPDF文書"""

    id: int
    filename: str
    title: str
    uploaded_by: int | None
    created_at: datetime | None = None
    encrypted_reference: str | None = None

    @property
    def state(self) -> DocumentState:
        if self.encrypted_reference:
            return DocumentState.REFERENCED
        return DocumentState.CREATED
