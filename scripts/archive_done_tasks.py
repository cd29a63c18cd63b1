"""
Archive sweep for Videomaker Log
Moves every done task off the active board; safe to run from cron
"""
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vmlog.db.database import AsyncSessionLocal, engine
from vmlog.db.schema import detect_schema_features
from vmlog.db.crud.task import archive_completed_tasks
from loguru import logger

async def run_archive_sweep():
    logger.info("📦 Starting archive sweep...")

    features = await detect_schema_features(engine)
    async with AsyncSessionLocal() as db:
        archived = await archive_completed_tasks(db, features)

    logger.info(f"✅ Archive sweep completed: {archived} tasks archived")
    await engine.dispose()
    return archived

if __name__ == "__main__":
    asyncio.run(run_archive_sweep())
