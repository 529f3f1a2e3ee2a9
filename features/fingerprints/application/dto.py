"""指紋照合機能のDTO"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FingerprintInput:
    user_id: int
    data: str
