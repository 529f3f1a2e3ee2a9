"""ORM models shared across features."""

from .log import Log
from .user import User, UserRole

__all__ = ["Log", "User", "UserRole"]
