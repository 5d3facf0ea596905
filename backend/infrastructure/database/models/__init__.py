"""
SQLAlchemy database models.
"""

from .base import Base, TimestampMixin
from .user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
]
