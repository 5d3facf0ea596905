"""
Token diagnostics.

Reports on a token's structure, validity and expiry without raising. Used by
support tooling and tests to explain why a session was rejected. Nothing here
may be used to authorize a request; use ``TokenService.verify`` for that.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from .errors import ExpiredTokenError, InvalidTokenError
from .tokens import CLAIM_SUBJECT_EMAIL, CLAIM_SUBJECT_ID, TokenService

EXPIRING_SOON = timedelta(hours=1)


@dataclass
class TokenValidation:
    """Outcome of a full signature/claims verification."""

    valid: bool = False
    expired: bool = False
    invalid: bool = False
    error: str | None = None
    claims: dict[str, Any] | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class TokenStructure:
    """Whether the token has the three dot-separated JWT segments."""

    valid_structure: bool = False
    has_header: bool = False
    has_payload: bool = False
    has_signature: bool = False
    parts: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class TokenExpiration:
    """Expiry information read from the unverified payload."""

    expired: bool = False
    expires_at: datetime | None = None
    expires_in: int | None = None  # whole seconds, never negative
    expiring_soon: bool = False
    time_until_expiry: timedelta | None = None
    error: str | None = None


@dataclass
class TokenReport:
    structure: TokenStructure
    validation: TokenValidation
    expiration: TokenExpiration

    @property
    def can_be_used(self) -> bool:
        return (
            self.structure.valid_structure
            and self.validation.valid
            and not self.expiration.expired
        )


class TokenInspector:
    """Explain the state of identity tokens issued by a TokenService."""

    def __init__(self, token_service: TokenService, expiring_soon: timedelta = EXPIRING_SOON):
        self._tokens = token_service
        self._expiring_soon = expiring_soon

    def validate(self, token: str) -> TokenValidation:
        result = TokenValidation()

        if not token:
            result.error = "Token is required"
            result.invalid = True
            return result

        try:
            claims = self._tokens.verify(token)
        except ExpiredTokenError as e:
            result.error = e.message
            result.expired = True
        except InvalidTokenError as e:
            result.error = e.message
            result.invalid = True
        else:
            result.valid = True
            result.claims = self._tokens.decode_unsafe(token)
            result.details = {
                "user_id": claims.subject_id,
                "email": claims.subject_email,
                "issued_at": claims.issued_at,
                "expires_at": claims.expires_at,
                "issuer": claims.issuer,
                "audience": claims.audience,
            }
            return result

        # Best-effort decode so callers can see whose token failed
        decoded = self._tokens.decode_unsafe(token)
        result.claims = decoded
        if decoded is not None:
            result.details = {
                "user_id": decoded.get(CLAIM_SUBJECT_ID),
                "email": decoded.get(CLAIM_SUBJECT_EMAIL),
                "expires_at": _timestamp(decoded.get("exp")),
            }
        return result

    def validate_structure(self, token: str) -> TokenStructure:
        result = TokenStructure()

        if not isinstance(token, str) or not token:
            result.error = "Token must be a non-empty string"
            return result

        parts = token.split(".")
        result.parts = parts
        if len(parts) != 3:
            result.error = f"Invalid token structure. Expected 3 parts, got {len(parts)}"
            return result

        result.has_header = bool(parts[0])
        result.has_payload = bool(parts[1])
        result.has_signature = bool(parts[2])
        result.valid_structure = result.has_header and result.has_payload and result.has_signature
        if not result.valid_structure:
            result.error = "Token has an empty segment"
        return result

    def validate_expiration(self, token: str) -> TokenExpiration:
        result = TokenExpiration()

        decoded = self._tokens.decode_unsafe(token)
        expires_at = _timestamp(decoded.get("exp")) if decoded else None
        if expires_at is None:
            result.error = "Token does not have expiration claim"
            return result

        remaining = expires_at - self._tokens.now()
        result.expires_at = expires_at
        result.time_until_expiry = remaining
        result.expired = remaining <= timedelta(0)
        result.expires_in = max(0, math.floor(remaining.total_seconds()))
        result.expiring_soon = timedelta(0) < remaining < self._expiring_soon
        return result

    def inspect(self, token: str) -> TokenReport:
        return TokenReport(
            structure=self.validate_structure(token),
            validation=self.validate(token),
            expiration=self.validate_expiration(token),
        )


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # Unverified payloads can carry NaN or values beyond the platform time_t
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, ValueError, OSError):
        return None
