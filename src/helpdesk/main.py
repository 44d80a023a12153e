"""
Helpdesk Ticketing - Main Application
=====================================

Ticket lifecycle service.

Modules:
- Tickets: versioned updates, threaded comments, audit timeline
- SLA Monitoring: due dates per priority and breach sweeps
- Identity: accounts, bearer tokens, roles
- Idempotency: safe retries for POST/PATCH

Clean Architecture Layers:
- Interfaces: FastAPI controllers and middleware
- Application: Services and DTOs
- Domain: Entities, value objects and policies
- Infrastructure: Database, repositories, scheduler
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.config import Settings, settings as default_settings
from helpdesk.core.exceptions import ApplicationException
from helpdesk.idempotency.interfaces import IdempotencyMiddleware
from helpdesk.identity.interfaces import auth_router, users_router
from helpdesk.infrastructure.database import close_database, create_tables, init_database
from helpdesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from helpdesk.shared.api.rate_limit import build_limiter, rate_limit_exceeded_handler
from helpdesk.shared.infrastructure.logging import get_logger, setup_logging
from helpdesk.sla.infrastructure import SLAScheduler
from helpdesk.tickets.interfaces import tickets_router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Tests pass their own ``Settings``; ``app`` below uses the environment.
    """
    settings = settings or default_settings
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP:
        1. Setup structured logging
        2. Initialize database and create tables
        3. Start the SLA breach sweep scheduler

        SHUTDOWN:
        1. Stop the scheduler
        2. Close database connections
        """
        setup_logging(settings.log_level, settings.environment)
        logger.info("Starting helpdesk service", extra={
            "version": settings.app_version,
            "environment": settings.environment
        })

        init_database(settings)
        # Development convenience; production schemas are managed with migrations
        await create_tables()

        scheduler = None
        if settings.sla_sweep_interval_seconds > 0:
            scheduler = SLAScheduler(interval_seconds=settings.sla_sweep_interval_seconds)
            await scheduler.start()
        app.state.sla_scheduler = scheduler

        logger.info("Helpdesk service started")

        yield

        logger.info("Shutting down helpdesk service")
        if scheduler:
            await scheduler.stop()
        await close_database()
        logger.info("Helpdesk service shutdown complete")

    app = FastAPI(
        title="Helpdesk Ticketing API",
        description="""
    ## Helpdesk Ticketing

    Requesters file tickets; agents and admins triage and resolve them within
    SLA windows; everyone on a ticket talks in threaded comments.

    - Every success response is `{"data": ...}`; every error is
      `{"error": {"code", "message", "field"}}`.
    - Updates use optimistic concurrency: send the `version` you read.
    - Send `Idempotency-Key` on POST/PATCH to make retries safe.
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.limiter = build_limiter(settings)

    # === Middleware (last added runs first) ===
    app.add_middleware(IdempotencyMiddleware)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID", "X-Idempotent-Replay"],
    )

    # === Exception handlers ===
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Routers ===
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(tickets_router)

    # === System endpoints ===

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Liveness check for load balancers and orchestrators."""
        scheduler = getattr(request.app.state, "sla_scheduler", None)
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - started_at, 3),
            "checks": {
                "sla_scheduler": "running" if scheduler and scheduler.is_running else "stopped",
            },
        }

    @app.get("/_meta", tags=["Health"])
    async def meta():
        """Service metadata."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "uptime": round(time.monotonic() - started_at, 3),
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "helpdesk.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.environment == "development",
        log_level="info"
    )
