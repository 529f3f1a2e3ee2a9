"""アップロードされたPDFファイルの保存先"""
from __future__ import annotations

import secrets
import time
from pathlib import Path
from typing import Protocol

from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from features.documents.domain.exceptions import (
    DocumentFileMissingError,
    DocumentValidationError,
)


class UploadedFile(Protocol):
    filename: str | None

    def save(self, dst: str) -> None:  # pragma: no cover - protocol
        ...


class PdfFileStorage:
    """ローカルディレクトリにPDFを保存する"""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def save(self, file: UploadedFile) -> str:
        """ファイルを保存し、保存名を返す

        保存名は ``<epoch ms>-<乱数8桁>-<元ファイル名>`` 形式。既存ファイルは上書きしない。
        """

        original = secure_filename(file.filename or "")
        if not original:
            raise DocumentValidationError("ファイル名が不正です")
        self._base_dir.mkdir(parents=True, exist_ok=True)
        stored_name = self._unique_name(original)
        file.save(str(self._base_dir / stored_name))
        return stored_name

    def _unique_name(self, original: str) -> str:
        while True:
            name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{original}"
            if not (self._base_dir / name).exists():
                return name

    def remove(self, filename: str) -> None:
        path = self._join(filename)
        if path is not None and path.is_file():
            path.unlink()

    def resolve(self, filename: str) -> Path:
        """保存名から実ファイルのパスを解決する"""

        path = self._join(filename)
        if path is None or not path.is_file():
            raise DocumentFileMissingError("ファイルが見つかりません")
        return path

    def _join(self, filename: str) -> Path | None:
        joined = safe_join(str(self._base_dir), filename)
        return Path(joined) if joined else None


__all__ = ["PdfFileStorage", "UploadedFile"]
