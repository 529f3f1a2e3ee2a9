"""Opaque public identifiers for issued certificates."""

from __future__ import annotations

import re
import secrets

CERTIFICATE_ID_BYTES = 8

_CERTIFICATE_ID_PATTERN = re.compile(r"[0-9a-f]{16}")


def generate_certificate_id() -> str:
    """Return 16 lowercase hex characters drawn from a CSPRNG.

    Uniqueness is not checked here; the ``certificates`` table carries a
    unique constraint and the issuing use case retries on collision.
    """

    return secrets.token_hex(CERTIFICATE_ID_BYTES)


def is_certificate_id(value: str | None) -> bool:
    return bool(value) and _CERTIFICATE_ID_PATTERN.fullmatch(value) is not None


__all__ = ["CERTIFICATE_ID_BYTES", "generate_certificate_id", "is_certificate_id"]
