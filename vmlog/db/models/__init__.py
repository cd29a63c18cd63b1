# vmlog/db/models/__init__.py
"""
Database models package
Imports all models for easy access
"""

# Import base classes and mixins
from vmlog.db.models.base import Base, TimestampMixin, UUIDMixin

# Import all enums
from vmlog.db.models.enums import TaskStatus, TaskPriority, UserRole

# Import authentication models
from vmlog.db.models.auth import User, RefreshToken, BlacklistedToken

# Import board models
from vmlog.db.models.task import Task

__all__ = [
    # Base classes
    'Base', 'TimestampMixin', 'UUIDMixin',

    # Enums
    'TaskStatus', 'TaskPriority', 'UserRole',

    # Authentication models
    'User', 'RefreshToken', 'BlacklistedToken',

    # Board models
    'Task',
]
