"""
Identity Interfaces Layer
==========================

HTTP routes and auth dependencies.
"""

from helpdesk.identity.interfaces.controllers import auth_router, users_router
from helpdesk.identity.interfaces.dependencies import get_current_principal, require_roles

__all__ = [
    "auth_router",
    "users_router",
    "get_current_principal",
    "require_roles",
]
