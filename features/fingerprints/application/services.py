"""指紋照合機能で利用する共通サービス定義"""
from __future__ import annotations

from dataclasses import dataclass

from features.fingerprints.infrastructure.fingerprint_store import FingerprintStore


@dataclass(slots=True)
class FingerprintServices:
    fingerprint_store: FingerprintStore


default_fingerprint_services = FingerprintServices(fingerprint_store=FingerprintStore())


__all__ = ["FingerprintServices", "default_fingerprint_services"]
