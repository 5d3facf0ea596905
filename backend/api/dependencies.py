"""
API dependencies: security services and authentication.

The services are built once from settings. ``main.lifespan`` calls the
builders at startup so a missing or malformed secret stops the process
before any request is served.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import IdentityClaims, PasswordHasher, SymmetricCipher, TokenService
from infrastructure.config import get_settings
from infrastructure.database.connection import get_db
from services.user_service import UserService

BEARER_PREFIX = "Bearer "


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_salt_rounds)


@lru_cache
def get_cipher() -> SymmetricCipher:
    return SymmetricCipher(get_settings().aes_secret_key)


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        secret_key=settings.jwt_secret,
        expires_in=settings.jwt_expires_in,
    )


def get_user_service(
    db: AsyncSession = Depends(get_db),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    cipher: SymmetricCipher = Depends(get_cipher),
) -> UserService:
    return UserService(db, password_hasher, cipher)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    token_service: TokenService = Depends(get_token_service),
) -> IdentityClaims:
    """
    Dependency to get the claims of the authenticated caller.

    Expired and invalid tokens raise ExpiredTokenError / InvalidTokenError,
    which the security error handler turns into distinct 401 messages.
    """
    if not authorization:
        raise _unauthorized("Authorization header is missing. Please provide a token.")

    if not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Invalid authorization format. Use: Bearer <token>")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("Token is missing. Please provide a valid token.")

    return token_service.verify(token)


CurrentUser = Annotated[IdentityClaims, Depends(get_current_user)]
