"""
Shared API Middleware
======================

Common middleware and exception handlers for the FastAPI application.

Every error leaves the service in the same envelope:

    {"error": {"code": "...", "message": "...", "field": "..."}}
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.core.exceptions import ApplicationException
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

HTTP_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    field: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Render the error envelope."""
    error = {"code": code, "message": message}
    if field:
        error["field"] = field
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    Reuses the caller's ``X-Correlation-ID`` when present.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs all requests and responses.

    Provides audit trail and debugging information.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "url": str(request.url),
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "url": str(request.url),
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


# ========== Exception Handlers ==========

async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Map typed application errors onto the error envelope."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request rejected",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "error_code": exc.code,
            "error_message": exc.message,
        }
    )
    return error_response(exc.status_code, exc.code, exc.message, exc.field)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid input field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = list(first.get("loc", ()))
    if loc and loc[0] in ("body", "query", "path", "header"):
        loc = loc[1:]
    field = next((str(part) for part in reversed(loc) if isinstance(part, str)), None)
    message = first.get("msg", "Invalid request")
    return error_response(400, "VALIDATION_ERROR", message, field)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-raised HTTP errors."""
    code = HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "VALIDATION_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Internal details are only exposed in development.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        },
        exc_info=exc,
    )

    settings = getattr(request.app.state, "settings", None)
    is_dev = getattr(settings, "environment", None) == "development"
    message = f"Internal server error: {exc}" if is_dev else "Internal server error"
    return error_response(500, "INTERNAL_ERROR", message)
