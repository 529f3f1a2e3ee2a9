"""証明書・試験結果API用Blueprint"""
from __future__ import annotations

from flask import Blueprint

certificates_api_bp = Blueprint("certificates_api", __name__)

from . import routes  # noqa: E402,F401

__all__ = ["certificates_api_bp"]
