"""Current-user profile routes."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.auth.middleware import AuthUser, get_current_user
from app.dependencies import get_user_service
from app.users.service import UserService

router = APIRouter()


class UserResponse(BaseModel):
    """User profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdateRequest(BaseModel):
    """Profile fields the user may change."""

    display_name: Optional[str] = Field(None, max_length=255)


@router.get("", response_model=UserResponse)
async def get_me(
    current_user: AuthUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Get the authenticated user's profile."""
    return await users.get_profile(current_user.user_id)


@router.put("", response_model=UserResponse)
async def update_me(
    body: ProfileUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update the authenticated user's profile.

    Only fields sent in the request body are changed.
    """
    return await users.update_profile(current_user.user_id, body.model_dump(exclude_unset=True))
