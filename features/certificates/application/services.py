"""証明書機能で利用する共通サービス定義"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.identifiers import generate_certificate_id
from features.certificates.infrastructure.certificate_store import CertificateStore
from features.certificates.infrastructure.exam_result_store import ExamResultStore, UserDirectory


@dataclass(slots=True)
class CertificateServices:
    certificate_store: CertificateStore
    exam_result_store: ExamResultStore
    user_directory: UserDirectory
    id_generator: Callable[[], str] = generate_certificate_id


default_certificate_services = CertificateServices(
    certificate_store=CertificateStore(),
    exam_result_store=ExamResultStore(),
    user_directory=UserDirectory(),
)


__all__ = ["CertificateServices", "default_certificate_services"]
