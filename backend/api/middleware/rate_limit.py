"""
Rate limiting for the credential endpoints, using slowapi.

Register and login are the brute-force targets: they get their own, tighter
limits. Everything else under the API shares a default limit. Health probes
are exempt so orchestrators never get throttled.

Limits are strings in the "count/period" format and come from settings:
- LOGIN_RATE_LIMIT (default 5/minute)
- REGISTER_RATE_LIMIT (default 3/minute)
- DEFAULT_RATE_LIMIT (default 100/minute)
"""

import ipaddress
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from infrastructure.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def client_ip(request: Request) -> str:
    """Rate-limit key: the first public address in the proxy headers, else the peer.

    Private and loopback values in X-Forwarded-For / X-Real-IP are ignored;
    accepting them would let a caller pick their own bucket.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    for candidate in (forwarded.split(",")[0], request.headers.get("x-real-ip", "")):
        try:
            addr = ipaddress.ip_address(candidate.strip())
        except ValueError:
            continue
        if not (addr.is_private or addr.is_loopback or addr.is_link_local):
            return str(addr)
    return get_remote_address(request)


RATE_LIMITS = {
    "login": settings.login_rate_limit,
    "register": settings.register_rate_limit,
    "default": settings.default_rate_limit,
}

if settings.is_production and settings.rate_limit_storage_uri.startswith("memory://"):
    logger.warning(
        "Rate limits are kept in process memory; each worker counts login and "
        "register attempts separately. Set RATE_LIMIT_STORAGE_URI to share them."
    )

limiter = Limiter(
    key_func=client_ip,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[RATE_LIMITS["default"]],
)
