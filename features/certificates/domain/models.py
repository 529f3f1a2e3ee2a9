"""証明書機能で利用するドメインモデル"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .grading import compute_average, compute_grade


@dataclass(slots=True)
class CertificateHolder:
    """証明書の所有者"""

    id: int
    name: str
    email: str
    role: str


@dataclass(slots=True)
class ExamResult:
    """試験結果"""

    id: int
    user_id: int
    exam_name: str
    year: int
    scores: dict[str, float] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def average(self) -> float:
        return compute_average(self.scores)

    @property
    def grade(self) -> str:
        return compute_grade(self.average)


@dataclass(slots=True)
class CertificateRecord:
    """発行済み証明書

    ``certificate_id``/``user_id``/``exam_result_id``/``issued_at`` は発行後に変更しない。
    """

    certificate_id: str
    user_id: int
    exam_result_id: int
    issued_at: datetime
    revoked: bool = False
    id: int | None = None


@dataclass(slots=True)
class CertificateView:
    """検証結果として外部に返す証明書情報"""

    certificate: CertificateRecord
    holder: CertificateHolder | None
    exam_result: ExamResult | None

    @property
    def is_valid(self) -> bool:
        return not self.certificate.revoked
