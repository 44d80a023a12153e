"""
Authentication Dependencies
============================

FastAPI dependencies that turn the ``Authorization`` header into a
:class:`Principal` and enforce role requirements.
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from helpdesk.config import Settings
from helpdesk.core.exceptions import ForbiddenException, UnauthorizedException
from helpdesk.identity.domain.entities import Principal
from helpdesk.identity.infrastructure.security import decode_access_token
from helpdesk.shared.api.dependencies import get_settings

bearer_scheme = HTTPBearer(auto_error=False, description="Access token from /auth/login")


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """Missing credentials are UNAUTHORIZED; bad tokens are INVALID_TOKEN."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Authentication required")
    return decode_access_token(credentials.credentials, settings)


def require_roles(*roles: str) -> Callable:
    """Dependency factory restricting a route to the given roles."""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise ForbiddenException("You do not have permission to perform this action")
        return principal

    return dependency
