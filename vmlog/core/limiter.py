# vmlog/core/limiter.py
from slowapi import Limiter
from slowapi.util import get_remote_address

from vmlog.core.config import settings

# Shared by the app state and the per-route decorators
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.DEFAULT_RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED
)
