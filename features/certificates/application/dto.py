"""証明書機能のDTO"""
from __future__ import annotations

from dataclasses import dataclass, field

from features.certificates.domain.models import (
    CertificateHolder,
    CertificateRecord,
    ExamResult,
)


@dataclass(slots=True)
class UploadExamResultInput:
    user_id: int
    exam_name: str
    year: int
    scores: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class IssueCertificateInput:
    user_id: int
    exam_result_id: int


@dataclass(slots=True)
class IssueCertificateOutput:
    certificate: CertificateRecord
    holder: CertificateHolder
    exam_result: ExamResult
    attempts: int = 1
