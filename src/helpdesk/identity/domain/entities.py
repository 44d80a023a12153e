"""
Identity Domain Entities
=========================

Users and the authenticated principal attached to a request.
"""

from dataclasses import dataclass
from datetime import datetime

from helpdesk.config import ROLE_LABELS, SUPPORT_ROLES, Role


@dataclass
class User:
    """A registered account."""
    id: str
    email: str
    full_name: str
    role: str
    created_at: datetime
    updated_at: datetime

    @property
    def role_label(self) -> str:
        return ROLE_LABELS.get(self.role, self.role)


@dataclass(frozen=True)
class Principal:
    """
    Caller identity decoded from a bearer token.

    Only the subject id and role are trusted; anything else about the
    user is looked up when needed.
    """
    user_id: str
    role: str

    @property
    def is_support(self) -> bool:
        return self.role in SUPPORT_ROLES

    @property
    def is_requester(self) -> bool:
        return self.role == Role.REQUESTER.value
