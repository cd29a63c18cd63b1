# vmlog/api/v1/endpoints/users.py - Member profiles
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi.util import get_remote_address
from typing import List
from uuid import UUID

from vmlog.db.database import get_db
from vmlog.db.crud.user import get_user_by_uuid, update_profile, update_password, list_profiles
from vmlog.api.v1.schemas.auth import PasswordChange
from vmlog.api.v1.schemas.users import UserResponse, ProfileResponse, ProfileUpdate
from vmlog.auth.security import Hasher
from vmlog.auth.dependencies import get_current_user
from vmlog.db.models import User
from vmlog.core.limiter import limiter
from vmlog.core import tracing
from vmlog.exceptions.auth import IncorrectPasswordError

router = APIRouter()


@router.get("/me", response_model=UserResponse)
@limiter.limit("30/minute")
async def read_current_user(request: Request, current_user: User = Depends(get_current_user)):
    return UserResponse.from_model(current_user)


@router.patch("/me", response_model=UserResponse)
@limiter.limit("10/minute")
async def update_current_user(
        request: Request,
        updates: ProfileUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    ip = get_remote_address(request)
    changes = updates.model_dump(exclude_unset=True)
    tracing.info("Profile update", user_email=current_user.email, fields=sorted(changes), ip=ip)

    user = await update_profile(db, current_user, changes)
    return UserResponse.from_model(user)


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("5/minute")
async def change_password(
        request: Request,
        change: PasswordChange,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    ip = get_remote_address(request)
    if not Hasher.verify_password(change.current_password, current_user.hashed_password):
        tracing.warning("Password change failed - wrong current password", user_email=current_user.email, ip=ip)
        raise IncorrectPasswordError()

    await update_password(db, current_user, Hasher.get_password_hash(change.new_password))
    tracing.info("Password changed", user_email=current_user.email, ip=ip)


@router.get("/", response_model=List[ProfileResponse])
async def list_members(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    """Every member profile, oldest first (assignee pickers, avatars)"""
    return [ProfileResponse.from_model(user) for user in await list_profiles(db)]


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_member(
        user_id: UUID,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    user = await get_user_by_uuid(db, user_id)
    if not user:
        tracing.warning("User not found", user_id=str(user_id), requester=current_user.email)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    return ProfileResponse.from_model(user)
