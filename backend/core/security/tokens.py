"""
JWT token service for authentication.
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from .errors import ConfigurationError, ExpiredTokenError, InvalidInputError, InvalidTokenError

TOKEN_ISSUER = "identity-management-service"
TOKEN_AUDIENCE = "identity-management-client"
DEFAULT_EXPIRES_IN = "7d"

# Claim names on the wire. Tokens issued by earlier deployments use these,
# so renaming them would invalidate every outstanding session.
CLAIM_SUBJECT_ID = "userId"
CLAIM_SUBJECT_EMAIL = "email"

_DURATION_RE = re.compile(
    r"^(?P<value>-?(?:\d+)?\.?\d+)\s*(?P<unit>"
    r"milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m|"
    r"hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?$",
    re.IGNORECASE,
)

_UNIT_MILLISECONDS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
    "y": 365.25 * 24 * 60 * 60 * 1000,
}


def _unit_key(unit: str) -> str:
    unit = unit.lower()
    if unit.startswith("ms") or unit.startswith("mil"):
        return "ms"
    if unit.startswith("mi") or unit == "m":
        return "m"
    return unit[0]


def parse_lifetime(value: int | float | str | timedelta) -> timedelta:
    """
    Parse a token lifetime.

    Numbers are seconds. Strings follow the ``ms`` package format used by
    ``jsonwebtoken``: ``"7d"``, ``"12h"``, ``"30m"``, ``"45s"``, ``"2 weeks"``.
    A string without a unit is a count of milliseconds.

    Raises:
        ConfigurationError: If the value cannot be parsed or is not positive
    """
    if isinstance(value, timedelta):
        lifetime = value
    elif isinstance(value, bool):
        raise ConfigurationError(f"Invalid token lifetime: {value!r}")
    elif isinstance(value, (int, float)):
        lifetime = timedelta(seconds=value)
    elif isinstance(value, str):
        match = _DURATION_RE.match(value.strip())
        if not match:
            raise ConfigurationError(f"Invalid token lifetime: {value!r}")
        unit = match.group("unit")
        millis = float(match.group("value")) * _UNIT_MILLISECONDS[_unit_key(unit) if unit else "ms"]
        lifetime = timedelta(milliseconds=millis)
    else:
        raise ConfigurationError(f"Invalid token lifetime: {value!r}")

    # jsonwebtoken floors lifetimes to whole seconds
    lifetime = timedelta(seconds=math.floor(lifetime.total_seconds()))
    if lifetime <= timedelta(0):
        raise ConfigurationError(f"Token lifetime must be at least one second: {value!r}")
    return lifetime


@dataclass(frozen=True)
class IdentityClaims:
    """Verified claims of an identity token."""

    subject_id: str
    subject_email: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str


class TokenService:
    """Service for issuing and verifying identity tokens."""

    def __init__(
        self,
        secret_key: str,
        expires_in: int | str | timedelta = DEFAULT_EXPIRES_IN,
        issuer: str = TOKEN_ISSUER,
        audience: str = TOKEN_AUDIENCE,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the token service.

        Args:
            secret_key: Secret key for signing tokens
            expires_in: Default token lifetime (seconds, timedelta or "7d"-style string)
            issuer: Issuer embedded in and required of every token
            audience: Audience embedded in and required of every token
            algorithm: JWT algorithm (default: HS256)
            clock: Returns the current time; defaults to ``datetime.now(UTC)``

        Raises:
            ConfigurationError: If the secret is missing or the lifetime is invalid
        """
        if not secret_key:
            raise ConfigurationError("JWT secret is not configured")
        if not issuer or not audience:
            raise ConfigurationError("Token issuer and audience are required")

        self._secret_key = secret_key
        self._lifetime = parse_lifetime(expires_in)
        self._issuer = issuer
        self._audience = audience
        self._algorithm = algorithm
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def now(self) -> datetime:
        return self._clock()

    def issue(
        self,
        subject_id: str,
        subject_email: str,
        expires_in: int | str | timedelta | None = None,
    ) -> str:
        """
        Issue a signed identity token.

        Args:
            subject_id: User ID to encode in the token
            subject_email: User email; stored lowercased and trimmed
            expires_in: Override the default lifetime for this token

        Returns:
            Encoded JWT

        Raises:
            InvalidInputError: If subject_id or subject_email is empty
        """
        subject_id = str(subject_id).strip() if subject_id is not None else ""
        if not subject_id or not subject_email or not str(subject_email).strip():
            raise InvalidInputError("UserId and email are required to generate token")

        lifetime = self._lifetime if expires_in is None else parse_lifetime(expires_in)
        issued_at = math.floor(self._clock().timestamp())

        payload = {
            CLAIM_SUBJECT_ID: subject_id,
            CLAIM_SUBJECT_EMAIL: str(subject_email).strip().lower(),
            "iat": issued_at,
            "exp": issued_at + int(lifetime.total_seconds()),
            "iss": self._issuer,
            "aud": self._audience,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> IdentityClaims:
        """
        Verify a token and return its claims.

        Signature, issuer and audience are checked before expiry, so a
        tampered token is reported as invalid even when it has also expired.

        Args:
            token: JWT to verify

        Returns:
            IdentityClaims

        Raises:
            InvalidTokenError: If the token is malformed, tampered or mis-scoped
            ExpiredTokenError: If the current time is at or past the expiry
        """
        if not isinstance(token, str) or not token.strip():
            raise InvalidTokenError("Token is required")

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                # Expiry is checked below against the injected clock. Do not
                # set require_exp: python-jose turns it back into verify_exp.
                options={
                    "verify_exp": False,
                    "require_iss": True,
                    "require_aud": True,
                },
            )
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        for field in (CLAIM_SUBJECT_ID, CLAIM_SUBJECT_EMAIL, "exp"):
            if not payload.get(field):
                raise InvalidTokenError(f"Invalid token: missing required claim {field}")

        exp = payload["exp"]
        iat = payload.get("iat", 0)
        if not _is_number(exp) or not _is_number(iat):
            raise InvalidTokenError("Invalid token: exp and iat must be numeric")

        try:
            expires_at = datetime.fromtimestamp(exp, tz=UTC)
            issued_at = datetime.fromtimestamp(iat, tz=UTC)
        except (OverflowError, ValueError, OSError) as e:
            raise InvalidTokenError("Invalid token: exp or iat out of range") from e

        if self._clock() >= expires_at:
            raise ExpiredTokenError("Token has expired")

        return IdentityClaims(
            subject_id=str(payload[CLAIM_SUBJECT_ID]),
            subject_email=str(payload[CLAIM_SUBJECT_EMAIL]),
            issued_at=issued_at,
            expires_at=expires_at,
            issuer=payload["iss"],
            audience=payload["aud"],
        )

    def decode_unsafe(self, token: str) -> dict[str, Any] | None:
        """
        Decode a token WITHOUT verifying signature, issuer, audience or expiry.

        For diagnostics only, such as inspecting an expired token. Never use
        the result to authorize anything.

        Args:
            token: JWT to decode

        Returns:
            The raw claims, or None if the token cannot be parsed
        """
        if not isinstance(token, str) or not token:
            return None
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return None
        return claims if isinstance(claims, dict) else None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
