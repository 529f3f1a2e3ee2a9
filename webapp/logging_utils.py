"""Helper utilities for structured request logging."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Tuple

_SENSITIVE_KEYWORDS = {
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "encryption_key",
    "encrypted",
}

# Matched on the whole key; "data" carries raw fingerprint templates
_SENSITIVE_EXACT_KEYS = {"data"}

MAX_LOG_PAYLOAD_BYTES = 60_000

_MAX_PARAM_STRING_LENGTH = 120


def _is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    key_lower = key.lower()
    if key_lower in _SENSITIVE_EXACT_KEYS:
        return True
    return any(keyword in key_lower for keyword in _SENSITIVE_KEYWORDS)


def mask_sensitive_data(data: Any) -> Any:
    """再帰的に辞書やリスト内の機密情報をマスクする。"""

    if isinstance(data, Mapping):
        masked = {}
        for key, value in data.items():
            if _is_sensitive_key(key):
                masked[key] = "***"
            else:
                masked[key] = mask_sensitive_data(value)
        return masked
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray)):
        return [mask_sensitive_data(item) for item in data]
    return data


def truncate_long_values(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: truncate_long_values(v) for k, v in value.items()}

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [truncate_long_values(item) for item in value]

    if isinstance(value, str):
        if len(value) <= _MAX_PARAM_STRING_LENGTH:
            return value
        return f"{value[:_MAX_PARAM_STRING_LENGTH]}… ({len(value)} chars)"

    if isinstance(value, (bytes, bytearray)):
        return f"<binary {len(value)} bytes>"

    return value


def _serialize(payload: Any) -> Tuple[str, int]:
    text = json.dumps(payload, ensure_ascii=False, default=str)
    return text, len(text.encode("utf-8"))


def prepare_log_payload(payload: Dict[str, Any], *, max_bytes: int = MAX_LOG_PAYLOAD_BYTES) -> str:
    """Serialise *payload*, truncating long values when over *max_bytes*."""

    text, size = _serialize(payload)
    if size <= max_bytes:
        return text

    text, size = _serialize(truncate_long_values(payload))
    if size <= max_bytes:
        return text

    fallback = {
        "status": payload.get("status"),
        "message": "payload omitted due to size limit",
        "_truncation": {"limitBytes": max_bytes, "omitted": True},
    }
    return _serialize(fallback)[0]


def summarize_files(files) -> Dict[str, Any]:
    """Describe uploaded files without their contents."""

    result: Dict[str, Any] = {}
    for key in files.keys():
        summaries = []
        for storage in files.getlist(key):
            summary: Dict[str, Any] = {"omitted": True}
            if storage.filename:
                summary["filename"] = storage.filename
            if storage.content_type:
                summary["contentType"] = storage.content_type
            summaries.append(summary)
        result[key] = summaries[0] if len(summaries) == 1 else summaries
    return result


__all__ = [
    "MAX_LOG_PAYLOAD_BYTES",
    "mask_sensitive_data",
    "prepare_log_payload",
    "summarize_files",
    "truncate_long_values",
]
