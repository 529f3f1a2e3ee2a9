"""Centralised application settings abstraction.

This module exposes :class:`ApplicationSettings` which consolidates the
configuration lookups of the service.  The process environment (or any mapping
provided) is the backing store; accessors return typed values and defaults.

The global :data:`settings` instance should be used for production code, while
tests can instantiate their own :class:`ApplicationSettings` with a dedicated
mapping to validate behaviour in isolation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


_BOOL_TRUE = {"1", "true", "yes", "on"}

DEFAULT_CERTIFICATE_ID_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class _EnvironmentFacade:
    """Thin wrapper that provides ``Mapping`` compatible access to env vars."""

    source: Mapping[str, str]

    @classmethod
    def from_environ(cls, env: Optional[Mapping[str, str]] = None) -> "_EnvironmentFacade":
        return cls(source=os.environ if env is None else env)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.source.get(key, default)


class ApplicationSettings:
    """Typed accessors over the configuration environment."""

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        self._env = _EnvironmentFacade.from_environ(env)

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._env.get(key)
        if value is None:
            return default
        value = value.strip()
        return value if value else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._get(key)
        if raw is None:
            return default
        return raw.lower() in _BOOL_TRUE

    def get_int(self, key: str, default: int) -> int:
        raw = self._get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            return default

    @property
    def testing(self) -> bool:
        return self.get_bool("TESTING")

    @property
    def secret_key(self) -> Optional[str]:
        return self._get("SECRET_KEY")

    @property
    def database_uri(self) -> str:
        return self._get("DATABASE_URI", "sqlite://") or "sqlite://"

    @property
    def reference_encryption_key(self) -> Optional[str]:
        """Raw hex key used by the reference cipher, validated at start-up."""

        return self._get("PDF_ENCRYPTION_KEY")

    @property
    def frontend_url(self) -> str:
        value = self._get("FRONTEND_URL", "http://localhost:3000") or ""
        return value.rstrip("/")

    @property
    def upload_directory(self) -> str:
        configured = self._get("UPLOAD_DIRECTORY")
        if configured:
            return configured
        return str(Path(__file__).resolve().parents[1] / "uploads")

    @property
    def certificate_id_max_attempts(self) -> int:
        attempts = self.get_int("CERTIFICATE_ID_MAX_ATTEMPTS", DEFAULT_CERTIFICATE_ID_MAX_ATTEMPTS)
        return max(attempts, 1)

    @property
    def log_to_database(self) -> bool:
        return self.get_bool("LOG_TO_DATABASE", default=not self.testing)

    @property
    def logs_database_uri(self) -> str:
        return self._get("LOGS_DATABASE_URI", "sqlite:///logs.db") or "sqlite:///logs.db"


settings = ApplicationSettings()


__all__ = ["ApplicationSettings", "DEFAULT_CERTIFICATE_ID_MAX_ATTEMPTS", "settings"]
