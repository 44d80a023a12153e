"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.
"""

from datetime import datetime, timedelta
from typing import Optional

from helpdesk.config import (
    DEFAULT_SLA_PRIORITY,
    SLA_WINDOW_HOURS,
    TERMINAL_STATUSES,
)


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class; all SLA window logic lives here.
    """

    @staticmethod
    def window(priority: Optional[str]) -> timedelta:
        """
        Response window for a priority.

        Unknown priorities get the medium window.
        """
        hours = SLA_WINDOW_HOURS.get(priority or "", SLA_WINDOW_HOURS[DEFAULT_SLA_PRIORITY])
        return timedelta(hours=hours)

    @staticmethod
    def due(priority: Optional[str], reference: datetime) -> datetime:
        """
        Calculate the SLA due timestamp.

        Args:
            priority: Ticket priority
            reference: Creation time, or the moment the priority changed

        Returns:
            The SLA deadline
        """
        return reference + SLACalculator.window(priority)

    @staticmethod
    def is_breached(due: Optional[datetime], status: str, now: datetime) -> bool:
        """A ticket is in breach once its deadline passes while it is still active."""
        if due is None or status in TERMINAL_STATUSES:
            return False
        return now >= due
