"""
Authentication API routes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import get_token_service, get_user_service
from api.middleware.rate_limit import RATE_LIMITS, limiter
from api.schemas.auth import (
    AuthData,
    Envelope,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from core.security import TokenService
from services.user_service import UserAlreadyExistsError, UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=Envelope[AuthData],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMITS["register"])
async def register(
    request: Request,
    register_data: RegisterRequest,
    user_service: UserService = Depends(get_user_service),
    token_service: TokenService = Depends(get_token_service),
) -> Envelope[AuthData]:
    """
    Register a new user account.

    The password is hashed and the Aadhaar number encrypted before storage.
    """
    try:
        user = await user_service.create_user(
            email=register_data.email,
            password=register_data.password,
            aadhaar=register_data.aadhaar,
            name=register_data.name,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    token = token_service.issue(user.id, user.email)

    return Envelope[AuthData](
        message="User registered successfully",
        data=AuthData(token=token, user=UserResponse.model_validate(user)),
    )


@router.post("/login", response_model=Envelope[AuthData])
@limiter.limit(RATE_LIMITS["login"])
async def login(
    request: Request,
    login_data: LoginRequest,
    user_service: UserService = Depends(get_user_service),
    token_service: TokenService = Depends(get_token_service),
) -> Envelope[AuthData]:
    """
    Login with email and password.

    Unknown emails and wrong passwords get the same response.
    """
    user = await user_service.authenticate(login_data.email, login_data.password)
    if not user:
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = token_service.issue(user.id, user.email)

    return Envelope[AuthData](
        message="Login successful",
        data=AuthData(token=token, user=UserResponse.model_validate(user)),
    )
