"""
SLA Domain Layer
================

Pure SLA rules: response windows per priority and the breach predicate.

This layer has no dependencies on infrastructure.
"""

from helpdesk.sla.domain.value_objects import SLACalculator

__all__ = [
    "SLACalculator",
]
