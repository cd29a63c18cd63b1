# vmlog/auth/context.py
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from vmlog.exceptions.board import Unauthorized

if TYPE_CHECKING:
    from vmlog.db.models import User


@dataclass(frozen=True)
class AuthContext:
    """The authenticated actor for one request, passed explicitly to store calls"""
    user: Optional["User"] = None

    def require_actor(self) -> "User":
        if self.user is None:
            raise Unauthorized("No authenticated user for this operation")
        return self.user
