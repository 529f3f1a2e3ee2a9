"""指紋照合機能のドメインモデル"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime


def fingerprint_digest(data: str) -> str:
    """照合に使うダイジェスト

    指紋データ本体は保存せず、SHA-256の16進表現のみを保持する。
    完全一致での照合なので結果は生データの比較と変わらない。
    """

    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class EnrolledFingerprint:
    """登録済みの指紋"""

    id: int
    user_id: int
    created_at: datetime | None = None
