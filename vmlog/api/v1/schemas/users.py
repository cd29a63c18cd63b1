# vmlog/api/v1/schemas/users.py
from pydantic import BaseModel, EmailStr, Field, UUID4, field_validator
from datetime import datetime
from typing import Optional

from vmlog.core.colors import USER_COLORS
from vmlog.db.models.enums import UserRole


class ProfileResponse(BaseModel):
    """
    Public profile of a board member, as shown next to the tasks they create.
    """
    id: UUID4
    display_name: str
    user_color: Optional[str] = None
    color: str
    role: UserRole

    @classmethod
    def from_model(cls, user):
        return cls(
            id=user.uuid,
            display_name=user.profile_name,
            user_color=user.user_color,
            color=user.color,
            role=user.role
        )


class UserResponse(ProfileResponse):
    """
    The signed-in user's own account, including email and timestamps.
    """
    email: EmailStr
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user):
        return cls(
            id=user.uuid,
            email=user.email,
            is_active=user.is_active,
            display_name=user.profile_name,
            user_color=user.user_color,
            color=user.color,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at
        )


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    user_color: Optional[str] = Field(None, description="Palette key, or null for the automatic colour")

    @field_validator("user_color")
    @classmethod
    def color_in_palette(cls, v):
        if v is not None and v not in USER_COLORS:
            raise ValueError(f"user_color must be one of: {', '.join(USER_COLORS)}")
        return v
