"""
Helpdesk Ticketing
==================

Ticket lifecycle service: versioned ticket mutation, threaded comments,
an append-only audit timeline, SLA breach tracking and idempotent request
replay behind a role-based access policy.
"""

__version__ = "1.0.0"
