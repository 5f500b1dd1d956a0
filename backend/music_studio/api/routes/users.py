"""
User Routes

Registers the authenticated identity as a studio user. Quota checks deny
users without a row here.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from music_studio.api.dependencies import CurrentUserDep, UserRepoDep
from music_studio.infrastructure.db.models.user import UserAccount


router = APIRouter()


class UserUpsertRequest(BaseModel):
    """Request to register or update the current user."""
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


def _user_to_response(user: UserAccount) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar_url=user.avatar_url,
    )


@router.get("/users/me", response_model=UserResponse)
async def get_me(user_id: CurrentUserDep, repo: UserRepoDep):
    """Get the current user's record."""
    user = await repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_to_response(user)


@router.put("/users/me", response_model=UserResponse)
async def upsert_me(
    request: UserUpsertRequest,
    user_id: CurrentUserDep,
    repo: UserRepoDep,
):
    """Create or update the current user's record."""
    owner = await repo.get_by_email(request.email)
    if owner is not None and owner.id != user_id:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await repo.get_by_id(user_id)
    if user is None:
        user = UserAccount(id=user_id, email=request.email)

    user.email = request.email
    user.name = request.name
    user.avatar_url = request.avatar_url
    user = await repo.save(user)
    return _user_to_response(user)
