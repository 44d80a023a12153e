"""
SLA Background Scheduler
=========================

APScheduler wrapper that runs the breach sweep on an interval.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from helpdesk.infrastructure.database import get_session_context
from helpdesk.shared.infrastructure.logging import get_logger, log_latency
from helpdesk.sla.application.services import SLABreachService
from helpdesk.sla.infrastructure.repositories import SQLAlchemySLABreachRepository

logger = get_logger(__name__)


async def run_breach_sweep() -> int:
    """One sweep in its own transaction."""
    with log_latency(logger, "sla_sweep"):
        async with get_session_context() as session:
            return await SLABreachService(SQLAlchemySLABreachRepository(session)).sweep()


class SLAScheduler:
    """
    Wrapper for APScheduler for background SLA evaluation.

    Manages the lifecycle of the scheduler and jobs.
    """

    def __init__(self, interval_seconds: int = 60):
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func=run_breach_sweep) -> None:
        """Start the scheduler with the given job function."""
        if self._running:
            logger.warning("SLA scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id="sla_breach_sweep",
            name="SLA Breach Sweep",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self._scheduler.start()
        self._running = True

        logger.info(
            "SLA scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("SLA scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running
