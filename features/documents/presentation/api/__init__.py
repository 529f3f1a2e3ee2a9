"""PDF文書API用Blueprint"""
from __future__ import annotations

from flask import Blueprint

documents_api_bp = Blueprint("documents_api", __name__)

from . import routes  # noqa: E402,F401

__all__ = ["documents_api_bp"]
