"""Rate limiting for the helpdesk API."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from helpdesk.config import Settings
from helpdesk.identity.infrastructure.security import peek_subject
from helpdesk.shared.api.middleware import error_response
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def principal_or_address(request: Request) -> str:
    """Authenticated callers share a budget across addresses; everyone else is keyed by IP."""
    subject = peek_subject(request.headers.get("Authorization"), request.app.state.settings)
    if subject:
        return f"user:{subject}"
    return get_remote_address(request)


def build_limiter(settings: Settings) -> Limiter:
    # In-memory storage is process-local; run a shared store before scaling out.
    per_minute = settings.rate_limit_per_minute
    return Limiter(
        key_func=principal_or_address,
        default_limits=[f"{per_minute}/minute"] if per_minute > 0 else [],
        storage_uri="memory://",
        enabled=per_minute > 0,
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called synchronously by SlowAPIMiddleware.
    logger.warning(
        "Rate limit exceeded",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "limit": str(exc.detail),
        }
    )
    return error_response(429, "RATE_LIMIT", "Too many requests, slow down")
