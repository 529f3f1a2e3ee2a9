"""指紋照合機能のユースケース"""
from __future__ import annotations

from core.logging_config import get_feature_logger, log_event_info
from features.fingerprints.application.services import (
    FingerprintServices,
    default_fingerprint_services,
)
from features.fingerprints.domain.exceptions import (
    FingerprintAlreadyEnrolledError,
    FingerprintUserNotFoundError,
    FingerprintValidationError,
)
from features.fingerprints.domain.models import EnrolledFingerprint

from .dto import FingerprintInput


def _require_data(payload: FingerprintInput) -> None:
    if not isinstance(payload.data, str) or not payload.data:
        raise FingerprintValidationError("指紋データは必須です")


class EnrollFingerprintUseCase:
    """指紋登録ユースケース"""

    def __init__(self, services: FingerprintServices | None = None) -> None:
        self._services = services or default_fingerprint_services

    def execute(self, payload: FingerprintInput) -> EnrolledFingerprint:
        _require_data(payload)
        store = self._services.fingerprint_store
        if not store.user_exists(payload.user_id):
            raise FingerprintUserNotFoundError("指定された利用者が見つかりません")
        if store.exists(payload.user_id, payload.data):
            raise FingerprintAlreadyEnrolledError("指紋は登録済みです")

        fingerprint = store.create(payload.user_id, payload.data)
        log_event_info(
            get_feature_logger(__name__),
            "Fingerprint enrolled",
            "fingerprints.enroll",
            fingerprint_id=fingerprint.id,
            user_id=fingerprint.user_id,
        )
        return fingerprint


class VerifyFingerprintUseCase:
    """指紋照合ユースケース

    未登録の利用者に対しては不一致として扱う。
    """

    def __init__(self, services: FingerprintServices | None = None) -> None:
        self._services = services or default_fingerprint_services

    def execute(self, payload: FingerprintInput) -> bool:
        _require_data(payload)
        matched = self._services.fingerprint_store.exists(payload.user_id, payload.data)
        log_event_info(
            get_feature_logger(__name__),
            "Fingerprint verified" if matched else "Fingerprint mismatch",
            "fingerprints.verify",
            user_id=payload.user_id,
            match=matched,
        )
        return matched


__all__ = ["EnrollFingerprintUseCase", "VerifyFingerprintUseCase"]
