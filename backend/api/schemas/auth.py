"""
Authentication and profile request/response schemas.
"""

import re
from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

_AADHAAR_RE = re.compile(r"^[0-9]{12}$")
_REPEATED_DIGIT_RE = re.compile(r"^([0-9])\1{11}$")
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")

T = TypeVar("T")


def _validate_password_strength(v: str) -> str:
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c.islower() for c in v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one number")
    return v


def _validate_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not 2 <= len(v) <= 100:
        raise ValueError("Name must be between 2 and 100 characters")
    if not _NAME_RE.match(v):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
    return v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class RegisterRequest(BaseModel):
    """Registration request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    aadhaar: str
    name: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return _strip(v)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """Validate password meets minimum requirements."""
        return _validate_password_strength(v)

    @field_validator("aadhaar")
    @classmethod
    def validate_aadhaar(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Aadhaar number is required")
        if not _AADHAAR_RE.match(v):
            raise ValueError("Aadhaar number must be exactly 12 digits")
        if _REPEATED_DIGIT_RE.match(v):
            raise ValueError("Aadhaar number cannot be all the same digit")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _validate_name(v)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return _strip(v)


class UserUpdateRequest(BaseModel):
    """Profile update request schema."""

    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _validate_name(v)


class UserResponse(BaseModel):
    """Public user fields. Never includes the password hash or encrypted Aadhaar."""

    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    """User profile with the decrypted Aadhaar number."""

    id: str
    email: str
    name: Optional[str] = None
    aadhaar: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthData(BaseModel):
    token: str
    user: UserResponse


class ProfileData(BaseModel):
    profile: ProfileResponse


class UserData(BaseModel):
    user: UserResponse


class Envelope(BaseModel, Generic[T]):
    """Standard success response wrapper."""

    success: bool = True
    message: str
    data: T
