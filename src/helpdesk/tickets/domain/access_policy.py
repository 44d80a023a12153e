"""
Ticket Access Policy
====================

Who may see and change a ticket.

- Agents and admins can access every ticket.
- Requesters can access tickets they created or are assigned to.
- Only agents and admins may set workflow fields (status, priority,
  assignee).
"""

from typing import Iterable

from helpdesk.config import WORKFLOW_FIELDS
from helpdesk.core.exceptions import ForbiddenException
from helpdesk.identity.domain.entities import Principal
from helpdesk.tickets.domain.entities import Ticket


def can_access(principal: Principal, ticket: Ticket) -> bool:
    if principal.is_support:
        return True
    return principal.user_id in (ticket.creator_id, ticket.assignee_id)


def ensure_can_access(principal: Principal, ticket: Ticket) -> None:
    if not can_access(principal, ticket):
        raise ForbiddenException("You do not have access to this ticket")


def ensure_workflow_fields_allowed(principal: Principal, supplied_fields: Iterable[str]) -> None:
    """
    Reject requesters that try to set workflow fields.

    Args:
        supplied_fields: wire names of the fields present in the request body
    """
    if principal.is_support:
        return
    for name in supplied_fields:
        if name in WORKFLOW_FIELDS:
            raise ForbiddenException(f"Requesters cannot set {name}", field=name)
