"""Reference cipher used to hide internal record identifiers.

Tokens have the wire format ``<32 hex IV>:<hex ciphertext>`` and are produced
with AES-256-CBC and PKCS#7 padding.  A fresh IV is drawn for every call, so
encrypting the same identifier twice yields two different tokens.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


logger = logging.getLogger(__name__)

KEY_HEX_LENGTH = 64
IV_LENGTH = 16
TOKEN_SEPARATOR = ":"

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


class ConfigError(RuntimeError):
    """Raised when the reference encryption key is missing or malformed."""


class InvalidToken(ValueError):
    """Raised for any reference token that cannot be decrypted.

    The message is intentionally generic; the specific reason is only logged.
    """

    def __init__(self) -> None:
        super().__init__("invalid token")


def validate_reference_key(raw: Optional[str]) -> Tuple[bool, str]:
    """Validate a hex encoded AES-256 key string.

    Returns ``(ok, why)`` tuple for use by config validators.
    """

    if not raw:
        return False, "未設定"
    value = raw.strip()
    if len(value) != KEY_HEX_LENGTH:
        return False, f"hex長さが不正: {len(value)} chars ({KEY_HEX_LENGTH}必要)"
    if not _HEX_PATTERN.fullmatch(value):
        return False, "hex以外の文字を含みます"
    return True, "hex(32bytes)"


@dataclass(frozen=True)
class ReferenceCipherConfig:
    """Immutable key material constructed once at start-up."""

    key: bytes

    @classmethod
    def from_hex(cls, raw: Optional[str]) -> "ReferenceCipherConfig":
        ok, why = validate_reference_key(raw)
        if not ok:
            raise ConfigError(f"PDF_ENCRYPTION_KEY must be 64 hex characters (32 bytes): {why}")
        return cls(key=bytes.fromhex(raw.strip()))


def _decode_hex(segment: str) -> bytes:
    if not segment or len(segment) % 2 or not _HEX_PATTERN.fullmatch(segment):
        raise ValueError("segment is not valid hex")
    return bytes.fromhex(segment)


class ReferenceCipher:
    """AES-256-CBC encrypt/decrypt pair over a fixed key."""

    def __init__(self, config: ReferenceCipherConfig) -> None:
        if len(config.key) != 32:
            raise ConfigError("AES-256-CBC key must be 32 bytes")
        self._algorithm = algorithms.AES(config.key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt *plaintext* under a freshly drawn IV."""

        return self.encrypt_with_iv(plaintext, os.urandom(IV_LENGTH))

    def encrypt_with_iv(self, plaintext: str, iv: bytes) -> str:
        if len(iv) != IV_LENGTH:
            raise ValueError(f"IV must be {IV_LENGTH} bytes")
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        ct = encryptor.update(padded) + encryptor.finalize()
        return iv.hex() + TOKEN_SEPARATOR + ct.hex()

    def decrypt(self, token: Optional[str]) -> str:
        """Decrypt a token produced by :meth:`encrypt`.

        Raises :class:`InvalidToken` for every failure mode.
        """

        try:
            return self._decrypt(token)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Reference token rejected: %s",
                exc,
                extra={"event": "reference.decrypt.invalid"},
            )
            raise InvalidToken() from None

    def _decrypt(self, token: Optional[str]) -> str:
        if not isinstance(token, str):
            raise TypeError("token must be a string")
        iv_hex, sep, ct_hex = token.strip().partition(TOKEN_SEPARATOR)
        if not sep:
            raise ValueError("separator missing")

        iv = _decode_hex(iv_hex)
        if len(iv) != IV_LENGTH:
            raise ValueError(f"IV length {len(iv)} bytes")
        ct = _decode_hex(ct_hex)
        if len(ct) % IV_LENGTH:
            raise ValueError("ciphertext is not block aligned")

        decryptor = Cipher(self._algorithm, modes.CBC(iv)).decryptor()
        padded = decryptor.update(ct) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        # UnicodeDecodeError is a ValueError subclass
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")


__all__ = [
    "ConfigError",
    "InvalidToken",
    "IV_LENGTH",
    "ReferenceCipher",
    "ReferenceCipherConfig",
    "validate_reference_key",
]
