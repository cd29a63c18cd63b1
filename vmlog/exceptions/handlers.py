# vmlog/exceptions/handlers.py
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from vmlog.core import tracing
from vmlog.exceptions.board import BoardError
import time


def get_safe_headers(request: Request) -> dict:
    """Extract and mask sensitive headers for logging"""
    headers = request.headers
    return {
        "user_agent": headers.get("user-agent", "unknown"),
        "authorization": (headers.get("authorization", "")[:10] + "...") if headers.get("authorization") else "none",
        "referer": headers.get("referer", "none")
    }


def error_body(request: Request, status_code: int, detail) -> dict:
    return {
        "detail": detail,
        "status_code": status_code,
        "trace_id": tracing.get_current_trace_id(),
        "timestamp": time.time(),
        "path": request.url.path
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    tracing.error(
        f"HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
        **get_safe_headers(request)
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, 'headers', None)
    )


async def board_exception_handler(request: Request, exc: BoardError) -> JSONResponse:
    """Render board errors; 5xx are logged as errors, the rest as warnings"""
    log = tracing.error if exc.status_code >= 500 else tracing.warning
    log(
        f"Board error {type(exc).__name__}: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
        error_type=type(exc).__name__
    )

    body = error_body(request, exc.status_code, exc.detail)
    body["error_type"] = type(exc).__name__
    return JSONResponse(status_code=exc.status_code, content=body)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    tracing.warning(
        f"Validation error: {len(errors)} errors",
        url=str(request.url),
        ip=get_remote_address(request),
        **get_safe_headers(request)
    )

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": errors,
            "trace_id": tracing.get_current_trace_id(),
            "timestamp": time.time()
        }
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client_ip = get_remote_address(request)
    tracing.warning(f"Rate limit exceeded | ip={client_ip} | path={request.url.path}")

    return JSONResponse(
        status_code=429,
        content=error_body(request, 429, f"Rate limit exceeded: {exc.detail}"),
        headers={"Retry-After": "60"}
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    tracing.error(
        f"UNHANDLED EXCEPTION: {str(exc)}",
        url=str(request.url),
        ip=get_remote_address(request),
        error_type=type(exc).__name__,
        **get_safe_headers(request)
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "trace_id": tracing.get_current_trace_id(),
            "timestamp": time.time(),
            "error_type": type(exc).__name__
        }
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    tracing.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
        **get_safe_headers(request)
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, 'headers', None)
    )
