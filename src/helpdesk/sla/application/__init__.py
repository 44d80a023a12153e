"""
SLA Application Layer
======================

Services that apply SLA rules to stored tickets.
"""

from helpdesk.sla.application.services import (
    ISLABreachRepository,
    SLABreachService,
)

__all__ = [
    "ISLABreachRepository",
    "SLABreachService",
]
