"""PDF文書機能で利用する例外定義"""
from __future__ import annotations


class DocumentError(Exception):
    """PDF文書関連の基本例外"""


class DocumentValidationError(DocumentError):
    """アップロード内容の検証に失敗した際の例外"""


class DocumentNotFoundError(DocumentError):
    """文書レコードが存在しない場合の例外"""


class DocumentFileMissingError(DocumentError):
    """レコードはあるが実ファイルが存在しない場合の例外"""
