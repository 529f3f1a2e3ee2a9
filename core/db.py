"""Shared SQLAlchemy instance.

Objects stay usable after commit so stores can map entities to domain
objects without reloading them.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy(session_options={"expire_on_commit": False})

__all__ = ["db"]
