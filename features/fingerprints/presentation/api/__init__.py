"""指紋照合API用Blueprint"""
from __future__ import annotations

from flask import Blueprint

fingerprints_api_bp = Blueprint("fingerprints_api", __name__)

from . import routes  # noqa: E402,F401

__all__ = ["fingerprints_api_bp"]
