"""
Security utilities for credentials, sensitive fields and identity tokens.
"""

from .encryption import SymmetricCipher
from .errors import (
    ConfigurationError,
    DecryptionError,
    ExpiredTokenError,
    InvalidInputError,
    InvalidTokenError,
    SecurityError,
    SecurityErrorKind,
)
from .inspection import TokenInspector
from .password import PasswordHasher
from .tokens import IdentityClaims, TokenService, parse_lifetime

__all__ = [
    "PasswordHasher",
    "SymmetricCipher",
    "TokenService",
    "TokenInspector",
    "IdentityClaims",
    "parse_lifetime",
    "SecurityError",
    "SecurityErrorKind",
    "InvalidInputError",
    "ConfigurationError",
    "ExpiredTokenError",
    "InvalidTokenError",
    "DecryptionError",
]
