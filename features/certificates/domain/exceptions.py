"""証明書機能で利用する例外定義"""
from __future__ import annotations


class CertificateError(Exception):
    """証明書関連の基本例外"""


class CertificateValidationError(CertificateError):
    """入力の検証に失敗した際の例外"""


class CertificateNotFoundError(CertificateError):
    """証明書が存在しない、または失効している場合の例外"""


class ExamResultNotFoundError(CertificateError):
    """試験結果が存在しない場合の例外"""


class UserNotFoundError(CertificateError):
    """利用者が存在しない場合の例外"""


class CertificateIdCollisionError(CertificateError):
    """生成した証明書IDが一意制約に違反した場合の例外"""

    def __init__(self, certificate_id: str) -> None:
        super().__init__(f"certificate id already exists: {certificate_id}")
        self.certificate_id = certificate_id


class CertificateIssuanceError(CertificateError):
    """再試行しても証明書を発行できなかった場合の例外"""
