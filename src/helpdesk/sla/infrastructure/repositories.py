"""
SLA Infrastructure Repositories
=================================

SQLAlchemy implementation of the breach sweep.
"""

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TERMINAL_STATUSES
from helpdesk.sla.application.services import ISLABreachRepository
from helpdesk.tickets.infrastructure.models import TicketModel


class SQLAlchemySLABreachRepository(ISLABreachRepository):
    """
    Flags breaches with a single UPDATE statement.

    The WHERE clause is :meth:`SLACalculator.is_breached` in SQL: a deadline
    at or before ``now`` on a ticket outside ``TERMINAL_STATUSES``. Rows
    that are not candidates are never written. ``version`` is left
    unchanged.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def mark_breached(self, now: datetime) -> int:
        stmt = (
            update(TicketModel)
            .where(
                TicketModel.sla_due_at <= now,
                TicketModel.sla_breached.is_(False),
                TicketModel.status.not_in(TERMINAL_STATUSES),
            )
            .values(sla_breached=True, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
