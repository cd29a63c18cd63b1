"""
Database connectivity, table counts and schema feature check
"""
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vmlog.db.database import AsyncSessionLocal, engine
from vmlog.db.schema import detect_schema_features
from sqlalchemy import text
from loguru import logger

TABLES = ("users", "tasks", "refresh_tokens", "blacklisted_tokens")

async def check_database():
    """Check database connectivity and table status"""
    logger.info("🔍 Checking database connectivity...")

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
            logger.info("✅ Database connection successful")

            logger.info("📊 Database statistics:")
            for table in TABLES:
                count = await db.execute(text(f"SELECT COUNT(*) FROM {table}"))
                logger.info(f"   {table}: {count.scalar()}")

            features = await detect_schema_features(engine)
            logger.info(f"   Task archiving: {'supported' if features.task_archiving else 'missing archived_at'}")

    except Exception as e:
        logger.error(f"❌ Database check failed: {e}")
        raise
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(check_database())
