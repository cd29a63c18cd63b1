import asyncio
from datetime import datetime, timezone
from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, and_, or_
from loguru import logger

from vmlog.db.models import RefreshToken, BlacklistedToken
from vmlog.auth.security import Hasher


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def create_refresh_token_db(
        db: AsyncSession,
        user_id: int,
        token: str,
        expires_at: datetime
) -> RefreshToken:
    """Store the digest of a freshly issued refresh token"""
    try:
        record = RefreshToken(
            user_id=user_id,
            token_hash=Hasher.hash_refresh_token(token),
            expires_at=expires_at
        )
        db.add(record)
        await db.commit()
        await db.refresh(record)
        logger.info(f"Refresh token stored for user {user_id}")
        return record
    except Exception as e:
        logger.error(f"Failed to store refresh token for user {user_id}: {e}")
        await db.rollback()
        raise


async def get_valid_refresh_token(db: AsyncSession, token: str) -> Optional[RefreshToken]:
    """Unrevoked, unexpired record matching a presented refresh token"""
    result = await db.execute(
        select(RefreshToken).filter(
            and_(
                RefreshToken.token_hash == Hasher.hash_refresh_token(token),
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > _now()
            )
        )
    )
    return result.scalars().first()


async def revoke_refresh_token_db(db: AsyncSession, record: RefreshToken) -> RefreshToken:
    try:
        record.revoked_at = _now()
        await db.commit()
        logger.info(f"Refresh token revoked for user {record.user_id}")
        return record
    except Exception as e:
        logger.error(f"Failed to revoke refresh token: {e}")
        await db.rollback()
        raise


async def add_to_blacklist(db: AsyncSession, jti: str, expires_at: datetime) -> BlacklistedToken:
    """Reject an access token id until it would have expired anyway"""
    try:
        entry = BlacklistedToken(jti=jti, expires_at=expires_at)
        db.add(entry)
        await db.commit()
        logger.info(f"Token blacklisted: {jti}")
        return entry
    except Exception as e:
        logger.error(f"Failed to blacklist token {jti}: {e}")
        await db.rollback()
        raise


async def is_jti_blacklisted(db: AsyncSession, jti: str) -> bool:
    result = await db.execute(
        select(BlacklistedToken.id).filter(
            and_(
                BlacklistedToken.jti == jti,
                BlacklistedToken.expires_at > _now()
            )
        )
    )
    return result.first() is not None


async def _purge_in_batches(db: AsyncSession, model, condition, batch_size: int, label: str) -> int:
    """Delete matching rows batch by batch, committing between batches"""
    total = 0
    try:
        while True:
            ids = select(model.id).where(condition).limit(batch_size)
            result = await db.execute(delete(model).where(model.id.in_(ids)))
            await db.commit()

            deleted = result.rowcount or 0
            total += deleted
            if deleted < batch_size:
                break
            await asyncio.sleep(0.1)
    except Exception as e:
        logger.error(f"Failed to purge {label}: {e}")
        await db.rollback()
        raise

    logger.info(f"Purged {total} {label}")
    return total


async def cleanup_expired_tokens(db: AsyncSession, batch_size: int = 1000) -> Dict[str, int]:
    """Remove expired/revoked refresh tokens and expired blacklist entries"""
    now = _now()
    refresh_deleted = await _purge_in_batches(
        db,
        RefreshToken,
        or_(RefreshToken.expires_at <= now, RefreshToken.revoked_at.isnot(None)),
        batch_size,
        "refresh tokens"
    )
    blacklist_deleted = await _purge_in_batches(
        db,
        BlacklistedToken,
        BlacklistedToken.expires_at <= now,
        batch_size,
        "blacklisted tokens"
    )
    return {
        "refresh_tokens_deleted": refresh_deleted,
        "blacklisted_tokens_deleted": blacklist_deleted,
        "total_deleted": refresh_deleted + blacklist_deleted
    }
