"""
API request and response schemas.
"""

from .auth import (
    AuthData,
    Envelope,
    LoginRequest,
    ProfileData,
    ProfileResponse,
    RegisterRequest,
    UserData,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "AuthData",
    "Envelope",
    "LoginRequest",
    "ProfileData",
    "ProfileResponse",
    "RegisterRequest",
    "UserData",
    "UserResponse",
    "UserUpdateRequest",
]
