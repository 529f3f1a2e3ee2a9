"""Time-related helpers.

Timestamps are stored as naive UTC ``datetime`` values and serialised with a
trailing ``Z`` so that API payloads stay consistent.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as an aware ``datetime`` instance."""

    return datetime.now(timezone.utc)


def isoformat_utc(value: datetime | None) -> str | None:
    """Return *value* in ISO 8601 format ending with ``Z``."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def utc_now_naive() -> datetime:
    """Return the current UTC time without tzinfo, as stored in the database."""

    return utc_now().replace(tzinfo=None)
