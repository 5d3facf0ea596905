"""
Profile API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import CurrentUser, get_user_service
from api.schemas.auth import (
    Envelope,
    ProfileData,
    ProfileResponse,
    UserData,
    UserResponse,
    UserUpdateRequest,
)
from services.user_service import UserNotFoundError, UserService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=Envelope[ProfileData])
async def get_profile(
    current_user: CurrentUser,
    user_service: UserService = Depends(get_user_service),
) -> Envelope[ProfileData]:
    """
    Get the caller's profile with the Aadhaar number decrypted.

    A stored Aadhaar that fails to decrypt surfaces as a 500, never as
    partial or corrupt data.
    """
    try:
        profile = await user_service.get_user_profile(current_user.subject_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return Envelope[ProfileData](
        message="Profile retrieved successfully",
        data=ProfileData(profile=ProfileResponse.model_validate(profile)),
    )


@router.put("", response_model=Envelope[UserData])
async def update_profile(
    update_data: UserUpdateRequest,
    current_user: CurrentUser,
    user_service: UserService = Depends(get_user_service),
) -> Envelope[UserData]:
    """Update the caller's display name."""
    try:
        user = await user_service.update_user_profile(
            current_user.subject_id,
            name=update_data.name,
        )
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return Envelope[UserData](
        message="Profile updated successfully",
        data=UserData(user=UserResponse.model_validate(user)),
    )
