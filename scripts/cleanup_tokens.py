"""
Token cleanup script for Videomaker Log
Run this periodically to clean expired refresh tokens and blacklist entries
"""
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vmlog.db.database import AsyncSessionLocal
from vmlog.db.crud.token import cleanup_expired_tokens
from loguru import logger

async def run_cleanup():
    """Run token cleanup process"""
    logger.info("🧹 Starting token cleanup process...")

    async with AsyncSessionLocal() as db:
        try:
            stats = await cleanup_expired_tokens(db)
        except Exception as e:
            logger.error(f"❌ Token cleanup failed: {e}")
            raise
        logger.info(f"✅ Token cleanup completed: {stats}")
        return stats

if __name__ == "__main__":
    asyncio.run(run_cleanup())
