"""
SLA Application Services
=========================

Breach evaluation over stored tickets.

Following SOLID principles:
- Single Responsibility: the service only decides *when* to sweep
- Dependency Inversion: storage is reached through ISLABreachRepository
"""

from abc import ABC, abstractmethod
from datetime import datetime

from helpdesk.core.clock import Clock, utc_now
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ISLABreachRepository(ABC):
    """Interface for the bulk breach update."""

    @abstractmethod
    async def mark_breached(self, now: datetime) -> int:
        """
        Flag every active, unflagged ticket whose deadline has passed.

        Returns the number of rows changed.
        """


# ========== Application Services ==========

class SLABreachService:
    """
    Marks overdue tickets as breached.

    Called inline before ticket reads and periodically by the scheduler.
    The caller owns the transaction.
    """

    def __init__(self, repository: ISLABreachRepository, clock: Clock = utc_now):
        self._repository = repository
        self._clock = clock

    async def sweep(self) -> int:
        now = self._clock()
        changed = await self._repository.mark_breached(now)
        if changed:
            logger.info(
                "SLA breaches recorded",
                extra={"breached_count": changed, "evaluated_at": now.isoformat()}
            )
        return changed
