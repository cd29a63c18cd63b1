# vmlog/db/schema.py
"""Deployed-schema feature detection.

The board code targets the current schema, but a deployment can briefly run
against a database where a later migration has not landed yet. Rather than
probing with failing queries, the columns are inspected once at startup and
the result is handed to the CRUD layer as a ``SchemaFeatures`` value.
"""
from dataclasses import dataclass
from typing import Set

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine
from loguru import logger


@dataclass(frozen=True)
class SchemaFeatures:
    """Optional schema capabilities the board depends on"""
    task_archiving: bool = True


_current_features = SchemaFeatures()


def _task_columns(sync_conn) -> Set[str]:
    inspector = inspect(sync_conn)
    if not inspector.has_table("tasks"):
        return set()
    return {column["name"] for column in inspector.get_columns("tasks")}


async def detect_schema_features(engine: AsyncEngine) -> SchemaFeatures:
    """Inspect the live database and report which optional columns exist"""
    async with engine.connect() as conn:
        columns = await conn.run_sync(_task_columns)

    features = SchemaFeatures(task_archiving="archived_at" in columns)
    if not features.task_archiving:
        logger.warning("tasks.archived_at column missing - archive features disabled until migration runs")
    return features


def set_schema_features(features: SchemaFeatures) -> None:
    global _current_features
    _current_features = features


def get_schema_features() -> SchemaFeatures:
    """FastAPI dependency returning the features detected at startup"""
    return _current_features
