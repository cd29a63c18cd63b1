# vmlog/main.py - Videomaker Log board API
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import time
import asyncio

from vmlog.core.config import settings
from vmlog.core.limiter import limiter
from vmlog.core import tracing
from vmlog.db.database import get_db, init_db, engine, AsyncSessionLocal
from vmlog.db.schema import detect_schema_features, set_schema_features, get_schema_features

from vmlog.api.v1.endpoints import auth, users, tasks

from vmlog.middleware.security import SecurityHeadersMiddleware
from vmlog.middleware.cors import setup_cors_middleware
from vmlog.middleware.monitoring import MonitoringMiddleware

from vmlog.exceptions.board import BoardError
from vmlog.exceptions.handlers import (
    http_exception_handler,
    board_exception_handler,
    validation_exception_handler,
    rate_limit_exceeded_handler,
    global_exception_handler,
    starlette_http_exception_handler
)

from vmlog.db.crud.token import cleanup_expired_tokens

TOKEN_CLEANUP_INTERVAL = 3600


async def periodic_token_cleanup():
    """Purge expired refresh tokens and blacklist entries every hour"""
    while True:
        try:
            async with AsyncSessionLocal() as db:
                stats = await cleanup_expired_tokens(db, batch_size=1000)
                tracing.info("Token cleanup completed", cleanup_stats=stats, task="periodic_cleanup")
        except SQLAlchemyError as e:
            tracing.error(f"Token cleanup failed: {e}", task="periodic_cleanup", error_type=type(e).__name__)

        await asyncio.sleep(TOKEN_CLEANUP_INTERVAL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    tracing.info("Videomaker Log API startup initiated")

    try:
        await init_db()
        tracing.info("Database initialized successfully")
    except Exception as e:
        tracing.error(f"Database initialization failed: {e}")
        raise

    features = await detect_schema_features(engine)
    set_schema_features(features)

    cleanup_task = asyncio.create_task(periodic_token_cleanup())

    tracing.info(f"Environment: {settings.ENVIRONMENT}")
    tracing.info(f"Task archiving: {'Enabled' if features.task_archiving else 'Disabled (column missing)'}")
    tracing.info(f"Rate Limiting: {'Enabled' if settings.RATE_LIMIT_ENABLED else 'Disabled'}")
    tracing.info(f"CORS Origins: {len(settings.cors_origins_list)} configured")

    yield

    tracing.info("Videomaker Log API shutdown initiated")
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    await engine.dispose()
    tracing.info("Videomaker Log API shutdown complete")


app = FastAPI(
    title="Videomaker Log API",
    description="Kanban board for a small video production team",
    version=tracing.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT == "development" else None
)

# Middleware (last added runs first)
app.add_middleware(MonitoringMiddleware)
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.ENVIRONMENT == "production")
setup_cors_middleware(app)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
tracing.setup_tracing(app)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(BoardError, board_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])


@app.get("/health", tags=["System"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check with a database round trip
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        tracing.error(f"Health check failed: {e}", endpoint="/health", error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy - database connection failed"
        )

    return {
        "status": "healthy",
        "service": tracing.SERVICE_NAME,
        "version": tracing.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "trace_id": tracing.get_current_trace_id(),
        "checks": {
            "database": "connected",
            "task_archiving": "enabled" if get_schema_features().task_archiving else "disabled",
            "rate_limiting": "enabled" if settings.RATE_LIMIT_ENABLED else "disabled"
        }
    }


@app.get("/", tags=["System"])
async def api_information():
    return {
        "message": "Videomaker Log API",
        "version": tracing.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "operational",
        "trace_id": tracing.get_current_trace_id(),
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "authentication": "/api/v1/auth",
            "users": "/api/v1/users",
            "tasks": "/api/v1/tasks",
        },
        "timestamp": time.time()
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
