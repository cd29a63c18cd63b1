from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, Dict, Any, List
from uuid import UUID
from loguru import logger

from vmlog.db.models import User

PROFILE_FIELDS = {"display_name", "user_color"}


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Retrieves a user by their email address.
    """
    try:
        result = await db.execute(select(User).filter(User.email == email))
        user = result.scalars().first()
        if user:
            logger.debug(f"User found: {email}")
        return user
    except Exception as e:
        logger.error(f"Error retrieving user by email {email}: {e}")
        return None


async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    """
    Retrieves a user by internal ID.
    """
    try:
        result = await db.execute(select(User).filter(User.id == user_id))
        return result.scalars().first()
    except Exception as e:
        logger.error(f"Error retrieving user by ID {user_id}: {e}")
        return None


async def get_user_by_uuid(db: AsyncSession, user_uuid: UUID) -> Optional[User]:
    try:
        result = await db.execute(select(User).filter(User.uuid == user_uuid))
        return result.scalars().first()
    except Exception as e:
        logger.error(f"Error retrieving user by UUID {user_uuid}: {e}")
        return None


async def create_user_db(db: AsyncSession, user_data: Dict[str, Any]) -> User:
    """
    Creates a new user record; display_name defaults to the email's local part.
    """
    try:
        if not user_data.get('email') or not user_data.get('hashed_password'):
            raise ValueError("Email and hashed_password are required")

        user_data.setdefault("display_name", user_data["email"].split("@", 1)[0])
        user = User(**user_data)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"User created successfully: {user.email}")
        return user
    except Exception as e:
        logger.error(f"Failed to create user: {e}")
        await db.rollback()
        raise


async def update_profile(db: AsyncSession, user: User, updates: Dict[str, Any]) -> User:
    """
    Updates profile fields (display name and colour) of a user.
    """
    try:
        for key, value in updates.items():
            if key in PROFILE_FIELDS:
                setattr(user, key, value)
            else:
                logger.warning(f"Attempt to update non-profile field: {key}")

        await db.commit()
        await db.refresh(user)
        logger.info(f"Profile updated: {user.email}")
        return user
    except Exception as e:
        logger.error(f"Failed to update profile {user.email}: {e}")
        await db.rollback()
        raise


async def list_profiles(db: AsyncSession) -> List[User]:
    """All members, oldest account first"""
    result = await db.execute(select(User).order_by(User.created_at.asc(), User.id.asc()))
    return list(result.scalars().all())


async def update_password(db: AsyncSession, user: User, hashed_password: str) -> User:
    """Stores a new password hash for the user"""
    try:
        user.hashed_password = hashed_password
        await db.commit()
        await db.refresh(user)
        logger.info(f"Password changed: {user.email}")
        return user
    except Exception as e:
        logger.error(f"Failed to change password for {user.email}: {e}")
        await db.rollback()
        raise
