import os
import re

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from core import crypto
from core.crypto import ConfigError, InvalidToken, ReferenceCipher, ReferenceCipherConfig


ZERO_KEY_HEX = "00" * 32
TOKEN_PATTERN = re.compile(r"^[0-9a-f]{32}:[0-9a-f]+$")


@pytest.fixture
def cipher():
    return ReferenceCipher(ReferenceCipherConfig.from_hex(os.urandom(32).hex()))


def test_validate_reference_key_valid():
    ok, msg = crypto.validate_reference_key("ab" * 32)
    assert ok is True
    assert msg == "hex(32bytes)"


@pytest.mark.parametrize(
    "raw",
    [None, "", "ab" * 31, "ab" * 33, "zz" * 32, ("ab" * 31) + "a "],
)
def test_config_rejects_missing_or_malformed_key(raw):
    with pytest.raises(ConfigError):
        ReferenceCipherConfig.from_hex(raw)


def test_config_accepts_uppercase_hex():
    config = ReferenceCipherConfig.from_hex("AB" * 32)
    assert config.key == bytes([0xAB]) * 32


@pytest.mark.parametrize("plaintext", ["42", "1", "9007199254740993", "0b6f1e0e-8a7e-4c1c-9a53-3a5f0f4c2d11", "", "日本語"])
def test_encrypt_decrypt_round_trip(cipher, plaintext):
    token = cipher.encrypt(plaintext)
    assert TOKEN_PATTERN.match(token)
    assert cipher.decrypt(token) == plaintext


def test_encrypt_uses_fresh_iv_per_call(cipher):
    first = cipher.encrypt("42")
    second = cipher.encrypt("42")
    assert first != second
    assert first.split(":")[0] != second.split(":")[0]


def test_fixed_iv_vector_matches_reference_aes():
    cipher = ReferenceCipher(ReferenceCipherConfig.from_hex(ZERO_KEY_HEX))
    iv = bytes(16)

    token = cipher.encrypt_with_iv("42", iv)

    # CBC with a zero IV over a single block equals raw AES of the padded block
    padded = b"42" + bytes([14]) * 14
    encryptor = Cipher(algorithms.AES(bytes(32)), modes.ECB()).encryptor()
    expected = encryptor.update(padded) + encryptor.finalize()
    assert token == "00" * 16 + ":" + expected.hex()
    assert len(token.split(":")[1]) == 32
    assert cipher.decrypt(token) == "42"


def test_fixed_iv_vector_is_stable():
    cipher = ReferenceCipher(ReferenceCipherConfig.from_hex(ZERO_KEY_HEX))
    assert cipher.encrypt_with_iv("42", bytes(16)) == cipher.encrypt_with_iv("42", bytes(16))


def _flip_hex(char: str) -> str:
    return format(int(char, 16) ^ 0x1, "x")


def test_tampered_ciphertext_never_returns_original(cipher):
    plaintext = "12345"
    token = cipher.encrypt(plaintext)
    iv_hex, ct_hex = token.split(":")
    for index in range(len(ct_hex)):
        tampered_ct = ct_hex[:index] + _flip_hex(ct_hex[index]) + ct_hex[index + 1:]
        try:
            result = cipher.decrypt(f"{iv_hex}:{tampered_ct}")
        except InvalidToken:
            continue
        assert result != plaintext


@pytest.mark.parametrize(
    "token",
    [
        "00112233445566778899aabbccddeeff",
        "not-a-token",
        "zz112233445566778899aabbccddeeff:00112233445566778899aabbccddeeff",
        "00112233445566778899aabbccddeeff:xyz",
        "00112233445566778899aabbccddeeff:",
        ":00112233445566778899aabbccddeeff",
        "00112233445566778899aabbccddee:00112233445566778899aabbccddeeff",
        "00112233445566778899aabbccddeeff00:00112233445566778899aabbccddeeff",
        "00112233445566778899aabbccddeeff:0011223344",
        "",
    ],
)
def test_malformed_tokens_are_rejected(cipher, token):
    with pytest.raises(InvalidToken) as excinfo:
        cipher.decrypt(token)
    assert str(excinfo.value) == "invalid token"


def test_non_string_token_is_rejected(cipher):
    with pytest.raises(InvalidToken):
        cipher.decrypt(None)


def test_token_from_other_key_is_rejected_or_garbled(cipher):
    other = ReferenceCipher(ReferenceCipherConfig.from_hex(os.urandom(32).hex()))
    token = other.encrypt("42")
    try:
        assert cipher.decrypt(token) != "42"
    except InvalidToken:
        pass


def test_decrypt_failure_reason_is_only_logged(cipher, caplog):
    with caplog.at_level("WARNING", logger="core.crypto"):
        with pytest.raises(InvalidToken) as excinfo:
            cipher.decrypt("no-separator")
    assert "separator" not in str(excinfo.value)
    assert any(getattr(r, "event", None) == "reference.decrypt.invalid" for r in caplog.records)
    assert any("separator" in r.getMessage() for r in caplog.records)
