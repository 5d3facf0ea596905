"""Identity Management Service - FastAPI application."""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.dependencies import get_cipher, get_password_hasher, get_token_service
from api.errors import security_error_handler
from api.middleware.rate_limit import limiter
from api.routes import api_router
from core.security.errors import SecurityError
from infrastructure.config import get_settings
from infrastructure.database import close_db, init_db
from infrastructure.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
MAX_BODY_SIZE = 1024 * 1024  # 1MB

# Responses from these paths carry tokens or the decrypted Aadhaar number
NO_STORE_PREFIXES = (f"{API_PREFIX}/auth", f"{API_PREFIX}/profile")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, build the security services, manage the database."""
    setup_logging(
        json_output=settings.is_production and not settings.debug,
        level="DEBUG" if settings.debug else "INFO",
    )
    logger.info(
        "Starting %s v%s (%s)", settings.app_name, settings.app_version, settings.environment
    )

    # A bad secret raises ConfigurationError here and aborts startup
    hasher = get_password_hasher()
    get_cipher()
    tokens = get_token_service()
    logger.info(
        "Security services ready: bcrypt cost %d, token lifetime %s",
        hasher.rounds,
        tokens.lifetime,
    )

    if settings.is_development:
        logger.info("Development mode: creating tables")
        await init_db()

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Registration, login and profile retrieval with encrypted Aadhaar storage",
    version=settings.app_version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# SlowAPIMiddleware enforces the default limit; @limiter.limit on register
# and login replaces it for those routes.
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(SecurityError, security_error_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Exception text can echo request data, so production logs keep it short
    if settings.is_production:
        logger.error(
            "Unhandled %s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            str(exc)[:200],
        )
    else:
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def reject_large_bodies(request: Request, call_next):
    content_length = request.headers.get("content-length", "")
    if request.method in ("POST", "PUT", "PATCH") and content_length.isdigit():
        if int(content_length) > MAX_BODY_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": "Request body too large (max 1MB)"},
            )
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - start) * 1000, 1)
    response.headers["X-Response-Time"] = f"{duration_ms}ms"

    path = request.url.path
    if not path.startswith(f"{API_PREFIX}/health"):
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
    return response


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    # Only a well-formed UUID from the caller is reused; anything else could
    # inject text into the logs.
    request_id = request.headers.get("X-Request-ID", "")
    try:
        request_id = str(uuid.UUID(request_id))
    except ValueError:
        request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if request.url.path.startswith(NO_STORE_PREFIXES):
        response.headers["Cache-Control"] = "no-store"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(api_router, prefix=API_PREFIX)


@app.get("/")
async def root():
    """Service information."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.is_development else "disabled",
        "health": f"{API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        workers=1 if settings.is_development else settings.workers,
    )
