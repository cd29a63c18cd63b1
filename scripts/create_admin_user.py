"""
Create the board master account for Videomaker Log
"""
import asyncio
import sys
from pathlib import Path
import getpass

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vmlog.db.database import AsyncSessionLocal
from vmlog.db.crud.user import create_user_db, get_user_by_email
from vmlog.db.models import UserRole
from vmlog.auth.security import Hasher
from loguru import logger

async def create_admin_user():
    """Create the master user interactively"""
    logger.info("👤 Creating board master account...")

    email = input("Enter master email: ").strip()
    if not email:
        logger.error("Email is required")
        return

    display_name = input("Display name (blank for email prefix): ").strip()

    password = getpass.getpass("Enter password: ")
    if not password:
        logger.error("Password is required")
        return

    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        logger.error("Passwords don't match")
        return

    async with AsyncSessionLocal() as db:
        existing_user = await get_user_by_email(db, email)
        if existing_user:
            logger.warning(f"User {email} already exists")
            return

        user_data = {
            "email": email,
            "hashed_password": Hasher.get_password_hash(password),
            "is_active": True,
            "role": UserRole.MASTER,
        }
        if display_name:
            user_data["display_name"] = display_name

        try:
            user = await create_user_db(db, user_data)
        except Exception as e:
            logger.error(f"❌ Failed to create master user: {e}")
            raise
        logger.info(f"✅ Master user created: {user.email} (ID: {user.id})")

if __name__ == "__main__":
    asyncio.run(create_admin_user())
