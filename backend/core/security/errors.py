"""
Error taxonomy for the credential, encryption and token services.

The core services know nothing about HTTP. Each error carries a
``SecurityErrorKind`` and the API layer maps kinds to status codes
(see ``api.errors``).
"""

from enum import StrEnum


class SecurityErrorKind(StrEnum):
    """Kinds of failures raised by the security services."""

    INVALID_INPUT = "invalid_input"
    CONFIGURATION = "configuration"
    EXPIRED_TOKEN = "expired_token"
    INVALID_TOKEN = "invalid_token"
    DECRYPTION = "decryption"


class SecurityError(Exception):
    """Base class for all security service errors."""

    kind: SecurityErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(SecurityError):
    """Caller supplied a missing, empty or malformed argument."""

    kind = SecurityErrorKind.INVALID_INPUT


class ConfigurationError(SecurityError):
    """A required secret is missing or malformed. Fatal at startup."""

    kind = SecurityErrorKind.CONFIGURATION


class ExpiredTokenError(SecurityError):
    """Token signature is valid but its expiry has passed."""

    kind = SecurityErrorKind.EXPIRED_TOKEN


class InvalidTokenError(SecurityError):
    """Token is malformed, tampered, or bound to another issuer/audience."""

    kind = SecurityErrorKind.INVALID_TOKEN


class DecryptionError(SecurityError):
    """Ciphertext could not be decrypted under the configured key."""

    kind = SecurityErrorKind.DECRYPTION
