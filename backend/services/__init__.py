"""
Service layer for business logic.
"""

from .user_service import (
    UserAlreadyExistsError,
    UserNotFoundError,
    UserService,
    UserServiceError,
)

__all__ = [
    "UserService",
    "UserServiceError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
]
