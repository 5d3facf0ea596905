"""API Routes."""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .profile import router as profile_router

# Create main API router
api_router = APIRouter()

# Include route modules
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(profile_router)
