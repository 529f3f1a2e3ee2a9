"""証明書機能のユースケース"""
from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping

from core.identifiers import is_certificate_id
from core.logging_config import get_feature_logger, log_event_info, log_event_warning
from core.settings import DEFAULT_CERTIFICATE_ID_MAX_ATTEMPTS
from core.time import utc_now_naive
from features.certificates.application.services import (
    CertificateServices,
    default_certificate_services,
)
from features.certificates.domain.exceptions import (
    CertificateIdCollisionError,
    CertificateIssuanceError,
    CertificateNotFoundError,
    CertificateValidationError,
)
from features.certificates.domain.models import (
    CertificateRecord,
    CertificateView,
    ExamResult,
)

from .dto import IssueCertificateInput, IssueCertificateOutput, UploadExamResultInput


def _normalize_scores(scores: Mapping[str, Any] | None) -> dict[str, float]:
    if not isinstance(scores, Mapping) or not scores:
        raise CertificateValidationError("scoresは1件以上の科目を含む必要があります")
    normalized: dict[str, float] = {}
    for subject, value in scores.items():
        name = str(subject).strip()
        if not name:
            raise CertificateValidationError("科目名が空です")
        if isinstance(value, bool) or not isinstance(value, Real):
            raise CertificateValidationError(f"スコアは数値で指定してください: {name}")
        try:
            finite = math.isfinite(float(value))
        except OverflowError:
            finite = False
        if not finite:
            raise CertificateValidationError(f"スコアが範囲外です: {name}")
        normalized[name] = value
    return normalized


class UploadExamResultUseCase:
    """試験結果登録ユースケース"""

    def __init__(self, services: CertificateServices | None = None) -> None:
        self._services = services or default_certificate_services

    def execute(self, payload: UploadExamResultInput) -> ExamResult:
        exam_name = (payload.exam_name or "").strip()
        if not exam_name:
            raise CertificateValidationError("examNameは必須です")
        scores = _normalize_scores(payload.scores)

        self._services.user_directory.get(payload.user_id)
        result = self._services.exam_result_store.create(
            user_id=payload.user_id,
            exam_name=exam_name,
            year=payload.year,
            scores=scores,
        )
        log_event_info(
            get_feature_logger(__name__),
            "Exam result uploaded",
            "results.upload",
            exam_result_id=result.id,
            user_id=result.user_id,
        )
        return result


class IssueCertificateUseCase:
    """証明書発行ユースケース

    証明書IDは乱数で生成するため一意性は保証されない。一意制約違反の場合は
    ``max_attempts`` 回まで再生成し、それでも失敗した場合は発行失敗とする。
    """

    def __init__(
        self,
        services: CertificateServices | None = None,
        *,
        max_attempts: int = DEFAULT_CERTIFICATE_ID_MAX_ATTEMPTS,
    ) -> None:
        self._services = services or default_certificate_services
        self._max_attempts = max(int(max_attempts), 1)

    def execute(self, payload: IssueCertificateInput) -> IssueCertificateOutput:
        holder = self._services.user_directory.get(payload.user_id)
        exam_result = self._services.exam_result_store.get(payload.exam_result_id)
        if exam_result.user_id != holder.id:
            raise CertificateValidationError("試験結果の所有者とuserIdが一致しません")

        logger = get_feature_logger(__name__)
        issued_at = utc_now_naive()
        for attempt in range(1, self._max_attempts + 1):
            record = CertificateRecord(
                certificate_id=self._services.id_generator(),
                user_id=holder.id,
                exam_result_id=exam_result.id,
                issued_at=issued_at,
            )
            try:
                saved = self._services.certificate_store.create(record)
            except CertificateIdCollisionError as exc:
                log_event_warning(
                    logger,
                    "Certificate id collision, regenerating",
                    "certificates.issue.collision",
                    attempt=attempt,
                    certificate_id=exc.certificate_id,
                )
                continue

            log_event_info(
                logger,
                "Certificate issued",
                "certificates.issue",
                certificate_id=saved.certificate_id,
                user_id=saved.user_id,
                exam_result_id=saved.exam_result_id,
                attempts=attempt,
            )
            return IssueCertificateOutput(
                certificate=saved,
                holder=holder,
                exam_result=exam_result,
                attempts=attempt,
            )

        raise CertificateIssuanceError(
            f"証明書IDの生成に{self._max_attempts}回失敗しました"
        )


class VerifyCertificateUseCase:
    """証明書検証ユースケース

    形式不正・存在しない・失効済みの証明書は区別せず、いずれも
    :class:`CertificateNotFoundError` とする。
    """

    def __init__(self, services: CertificateServices | None = None) -> None:
        self._services = services or default_certificate_services

    def execute(self, certificate_id: str) -> CertificateView:
        certificate_id = (certificate_id or "").strip()
        if not certificate_id:
            raise CertificateValidationError("certificateIdは必須です")
        if not is_certificate_id(certificate_id):
            raise CertificateNotFoundError("指定された証明書が見つかりません")
        view = self._services.certificate_store.get_view(certificate_id)
        if not view.is_valid:
            raise CertificateNotFoundError("指定された証明書が見つかりません")
        return view


class ListStudentCertificatesUseCase:
    """ログイン中の利用者の証明書一覧"""

    def __init__(self, services: CertificateServices | None = None) -> None:
        self._services = services or default_certificate_services

    def execute(self, user_id: int) -> list[CertificateView]:
        return self._services.certificate_store.list_for_user(user_id)


class ListStudentExamResultsUseCase:
    def __init__(self, services: CertificateServices | None = None) -> None:
        self._services = services or default_certificate_services

    def execute(self, user_id: int) -> list[ExamResult]:
        return self._services.exam_result_store.list_for_user(user_id)


class RevokeCertificateUseCase:
    """証明書失効ユースケース"""

    def __init__(self, services: CertificateServices | None = None) -> None:
        self._services = services or default_certificate_services

    def execute(self, certificate_id: str, *, actor: str | None = None) -> CertificateRecord:
        record = self._services.certificate_store.revoke(certificate_id)
        log_event_info(
            get_feature_logger(__name__),
            "Certificate revoked",
            "certificates.revoke",
            certificate_id=record.certificate_id,
            actor=actor,
        )
        return record


__all__ = [
    "IssueCertificateUseCase",
    "ListStudentCertificatesUseCase",
    "ListStudentExamResultsUseCase",
    "RevokeCertificateUseCase",
    "UploadExamResultUseCase",
    "VerifyCertificateUseCase",
]
