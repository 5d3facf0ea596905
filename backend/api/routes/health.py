"""Health and readiness endpoints."""

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_cipher, get_password_hasher, get_token_service
from api.middleware.rate_limit import limiter
from core.security import SecurityError
from infrastructure.config import get_settings
from infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])
settings = get_settings()

DB_CHECK_TIMEOUT = 5.0


def _security_status() -> dict[str, str]:
    """Build each security service; a failure means the secrets are unusable."""
    checks = {
        "password_hashing": get_password_hasher,
        "field_encryption": get_cipher,
        "tokens": get_token_service,
    }
    result = {}
    for name, build in checks.items():
        try:
            build()
            result[name] = "ok"
        except SecurityError as e:
            logger.error("Security service %s is misconfigured: %s", name, e.message)
            result[name] = "misconfigured"
    return result


async def _database_status(db: AsyncSession) -> str:
    try:
        result = await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=DB_CHECK_TIMEOUT)
        result.scalar()
        return "connected"
    except TimeoutError:
        logger.error("Health check DB timeout")
        return "error: database timeout"
    except Exception as e:
        logger.error("Health check DB error: %s", str(e))
        return "error: database check failed"


@router.get("/health")
@limiter.exempt
async def health_check():
    """Liveness: the process is up and serving."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/db")
@limiter.exempt
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """Health check with database connectivity."""
    db_status = await _database_status(db)
    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/ready")
@limiter.exempt
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Readiness: the database answers and every security service can be built."""
    db_status = await _database_status(db)
    security = _security_status()
    ready = db_status == "connected" and all(v == "ok" for v in security.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"ready": ready, "database": db_status, "security": security},
    )
