"""
Identity Controllers (API Routes)
==================================

Registration, login, current-user lookup and admin role management.

Controllers are thin - they delegate to UserService.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Role, Settings
from helpdesk.core.clock import Clock
from helpdesk.identity.application import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    UserResponse,
    UserService,
)
from helpdesk.identity.domain.entities import Principal, User
from helpdesk.identity.interfaces.dependencies import get_current_principal, require_roles
from helpdesk.infrastructure.database import get_session
from helpdesk.shared.api.dependencies import get_clock, get_settings
from helpdesk.shared.api.schemas import ERROR_RESPONSES, Envelope

auth_router = APIRouter(prefix="/auth", tags=["Authentication"], responses=ERROR_RESPONSES)
users_router = APIRouter(prefix="/users", tags=["Users"], responses=ERROR_RESPONSES)


# ========== Dependencies ==========

async def get_user_service(
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(session, clock, settings)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        role_label=user.role_label,
        created_at=user.created_at,
    )


# ========== Route Handlers ==========

@auth_router.post(
    "/register",
    response_model=Envelope[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a requester account",
    description="""
    Create a new account with the **requester** role and return a bearer token.

    Emails are case-insensitive; registering an existing address returns
    `409 EMAIL_TAKEN`.
    """,
)
async def register(
    payload: RegisterRequest,
    service: UserService = Depends(get_user_service),
):
    token, user = await service.register(payload.email, payload.full_name, payload.password)
    return Envelope(data=AuthResponse(token=token, user=to_user_response(user)))


@auth_router.post(
    "/login",
    response_model=Envelope[AuthResponse],
    summary="Exchange credentials for a bearer token",
)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    token, user = await service.login(payload.email, payload.password)
    return Envelope(data=AuthResponse(token=token, user=to_user_response(user)))


@auth_router.get(
    "/me",
    response_model=Envelope[UserResponse],
    summary="Current user",
)
async def me(
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    user = await service.get_user(principal.user_id)
    return Envelope(data=to_user_response(user))


@users_router.patch(
    "/{user_id}/role",
    response_model=Envelope[UserResponse],
    summary="Change a user's role (admin only)",
    description="""
    Promote or demote an account. The new role applies to tokens issued
    after the change.
    """,
)
async def update_role(
    user_id: str,
    payload: RoleUpdateRequest,
    principal: Principal = Depends(require_roles(Role.ADMIN.value)),
    service: UserService = Depends(get_user_service),
):
    user = await service.update_role(user_id, payload.role, principal.user_id)
    return Envelope(data=to_user_response(user))
