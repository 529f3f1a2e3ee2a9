"""指紋照合機能で利用する例外定義"""
from __future__ import annotations


class FingerprintError(Exception):
    """指紋関連の基本例外"""


class FingerprintValidationError(FingerprintError):
    """入力の検証に失敗した際の例外"""


class FingerprintUserNotFoundError(FingerprintError):
    """登録対象の利用者が存在しない場合の例外"""


class FingerprintAlreadyEnrolledError(FingerprintError):
    """同じ利用者に同じ指紋データが登録済みの場合の例外"""
