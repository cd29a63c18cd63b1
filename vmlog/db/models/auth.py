# vmlog/db/models/auth.py
"""Authentication and profile models"""
import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, Uuid, func, ForeignKey, Index
from sqlalchemy.orm import relationship

from vmlog.db.models.base import Base, TimestampMixin, UUIDMixin
from vmlog.db.models.enums import UserRole, enum_values
from vmlog.core.colors import resolve_user_color


class User(Base, UUIDMixin, TimestampMixin):
    """Board member with login credentials and profile"""
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Profile
    display_name = Column(String(100), nullable=True)
    user_color = Column(String(20), nullable=True)
    role = Column(
        Enum(UserRole, values_callable=enum_values, name="user_role"),
        nullable=False,
        default=UserRole.MEMBER
    )

    # Relationships
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_user_email_active', 'email', 'is_active'),
        Index('idx_user_created_at', 'created_at'),
    )

    @property
    def profile_name(self) -> str:
        return self.display_name or self.email.split("@", 1)[0]

    @property
    def color(self) -> str:
        return resolve_user_color(str(self.uuid), self.user_color)

    def __repr__(self):
        return f"<User email={self.email}>"


class RefreshToken(Base, TimestampMixin):
    """Refresh token, stored as a digest"""
    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(255), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    issued_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index('idx_refresh_token_user_active', 'user_id', 'revoked_at'),
        Index('idx_refresh_token_cleanup', 'expires_at', 'revoked_at'),
    )

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id} expires_at={self.expires_at}>"


class BlacklistedToken(Base):
    __tablename__ = "blacklisted_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String(255), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    blacklisted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_blacklisted_jti_expires', 'jti', 'expires_at'),
    )

    def __repr__(self):
        return f"<BlacklistedToken jti={self.jti}>"
