"""
Idempotency Middleware
======================

Replays the stored response for a repeated ``Idempotency-Key``.

- Applies to POST and PATCH requests that carry the header.
- First use: the request runs normally and its response is stored.
- Repeat: the stored status and body are returned verbatim with
  ``X-Idempotent-Replay: 1``; the route handler does not run.

Storing is best-effort: failures are logged and the client still gets
its response. Server errors (5xx) are not stored, so they can be retried.
Two concurrent first attempts with the same key may both execute.
"""

import hashlib
import json
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.config import IDEMPOTENCY_HEADER, IDEMPOTENT_REPLAY_HEADER
from helpdesk.core.clock import utc_now
from helpdesk.identity.infrastructure.security import peek_subject
from helpdesk.idempotency.infrastructure.repositories import SQLAlchemyIdempotencyRepository
from helpdesk.infrastructure.database import get_session_context
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

IDEMPOTENT_METHODS = ("POST", "PATCH")
MAX_KEY_LENGTH = 255


def hash_request(method: str, path: str, body: bytes, query: dict) -> str:
    """SHA-256 over the method, path, body and query string."""
    try:
        parsed: Any = json.loads(body) if body else None
    except ValueError:
        parsed = body.decode("utf-8", errors="replace")
    canonical = json.dumps(
        {"method": method, "path": path, "body": parsed, "query": query},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class IdempotencyMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method not in IDEMPOTENT_METHODS:
            return await call_next(request)

        key = (request.headers.get(IDEMPOTENCY_HEADER) or "").strip()
        if not key:
            return await call_next(request)
        key = key[:MAX_KEY_LENGTH]

        async with get_session_context() as session:
            existing = await SQLAlchemyIdempotencyRepository(session).get(key)
            if existing is not None:
                logger.info(
                    "Idempotent replay",
                    extra={
                        "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                        "idempotency_key": key,
                        "path": request.url.path,
                    }
                )
                return Response(
                    content=existing.response_body,
                    status_code=existing.status_code,
                    media_type="application/json",
                    headers={IDEMPOTENT_REPLAY_HEADER: "1"},
                )

        request_body = await request.body()
        response = await call_next(request)

        if response.status_code >= 500:
            return response

        response_body = b"".join([chunk async for chunk in response.body_iterator])
        await self._store(request, key, request_body, response.status_code, response_body)

        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def _store(
        self,
        request: Request,
        key: str,
        request_body: bytes,
        status_code: int,
        response_body: bytes,
    ) -> None:
        try:
            async with get_session_context() as session:
                await SQLAlchemyIdempotencyRepository(session).save(
                    key=key,
                    user_id=peek_subject(
                        request.headers.get("Authorization"),
                        request.app.state.settings,
                    ),
                    method=request.method,
                    path=request.url.path,
                    request_hash=hash_request(
                        request.method,
                        request.url.path,
                        request_body,
                        dict(request.query_params),
                    ),
                    response_body=response_body.decode("utf-8"),
                    status_code=status_code,
                    now=utc_now(),
                )
        except Exception as e:
            logger.warning(
                "Failed to store idempotent response",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                    "idempotency_key": key,
                    "error": str(e),
                }
            )
