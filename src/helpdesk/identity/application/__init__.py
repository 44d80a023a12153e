"""
Identity Application Layer
===========================

Account services and their DTOs.
"""

from helpdesk.identity.application.dto import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    SupportMemberResponse,
    SupportTeamResponse,
    UserResponse,
)
from helpdesk.identity.application.services import UserService, normalize_email

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "RoleUpdateRequest",
    "SupportMemberResponse",
    "SupportTeamResponse",
    "UserResponse",
    "UserService",
    "normalize_email",
]
