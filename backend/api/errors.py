"""
HTTP mapping for security errors.

Core services raise ``SecurityError`` subclasses tagged with a kind; this
table is the only place those kinds become status codes and user-facing
messages.
"""

import logging
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import JSONResponse

from core.security.errors import SecurityError, SecurityErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[SecurityErrorKind, int] = {
    SecurityErrorKind.INVALID_INPUT: HTTPStatus.BAD_REQUEST,
    SecurityErrorKind.CONFIGURATION: HTTPStatus.INTERNAL_SERVER_ERROR,
    SecurityErrorKind.EXPIRED_TOKEN: HTTPStatus.UNAUTHORIZED,
    SecurityErrorKind.INVALID_TOKEN: HTTPStatus.UNAUTHORIZED,
    SecurityErrorKind.DECRYPTION: HTTPStatus.INTERNAL_SERVER_ERROR,
}

# None means the error's own message is safe to show
MESSAGE_BY_KIND: dict[SecurityErrorKind, str | None] = {
    SecurityErrorKind.INVALID_INPUT: None,
    SecurityErrorKind.CONFIGURATION: "Internal server error",
    SecurityErrorKind.EXPIRED_TOKEN: "Token has expired. Please login again.",
    SecurityErrorKind.INVALID_TOKEN: "Invalid token. Please login again.",
    SecurityErrorKind.DECRYPTION: "Failed to retrieve profile",
}


def status_for(error: SecurityError) -> int:
    return int(STATUS_BY_KIND.get(error.kind, HTTPStatus.INTERNAL_SERVER_ERROR))


def message_for(error: SecurityError) -> str:
    return MESSAGE_BY_KIND.get(error.kind) or error.message


async def security_error_handler(request: Request, exc: SecurityError) -> JSONResponse:
    """Translate a SecurityError raised anywhere in a request into a response."""
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
    else:
        logger.info("%s on %s %s", type(exc).__name__, request.method, request.url.path)

    headers = None
    if status_code == HTTPStatus.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content={"detail": message_for(exc)},
        headers=headers,
    )
