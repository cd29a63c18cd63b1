"""CRUD operations for database models"""
from .user import (
    get_user_by_email,
    get_user_by_id,
    get_user_by_uuid,
    create_user_db,
    update_profile,
    list_profiles
)
from .token import (
    create_refresh_token_db,
    get_valid_refresh_token,
    revoke_refresh_token_db,
    add_to_blacklist,
    is_jti_blacklisted,
    cleanup_expired_tokens
)
from . import task

__all__ = [
    # User CRUD
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_uuid",
    "create_user_db",
    "update_profile",
    "list_profiles",
    # Token CRUD
    "create_refresh_token_db",
    "get_valid_refresh_token",
    "revoke_refresh_token_db",
    "add_to_blacklist",
    "is_jti_blacklisted",
    "cleanup_expired_tokens",
    # Board
    "task",
]
