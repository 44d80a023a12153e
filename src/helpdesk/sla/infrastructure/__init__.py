"""
SLA Infrastructure Layer
=========================

- Repositories: bulk breach update
- Scheduler: APScheduler job running the sweep in the background
"""

from helpdesk.sla.infrastructure.repositories import SQLAlchemySLABreachRepository
from helpdesk.sla.infrastructure.scheduler import SLAScheduler, run_breach_sweep

__all__ = [
    "SQLAlchemySLABreachRepository",
    "SLAScheduler",
    "run_breach_sweep",
]
