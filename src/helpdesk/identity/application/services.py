"""
Identity Application Services
==============================

Registration, login and role management.
"""

from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Role, Settings, settings as default_settings
from helpdesk.core.clock import Clock, utc_now
from helpdesk.core.exceptions import (
    EmailTakenException,
    UnauthorizedException,
    UserNotFoundException,
)
from helpdesk.identity.domain.entities import User
from helpdesk.identity.infrastructure.repositories import SQLAlchemyUserRepository, to_user
from helpdesk.identity.infrastructure.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """
    Account lifecycle.

    Each public method is one unit of work and commits before returning.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = utc_now,
        settings: Optional[Settings] = None,
    ):
        self._session = session
        self._clock = clock
        self._settings = settings or default_settings
        self._users = SQLAlchemyUserRepository(session)

    @asynccontextmanager
    async def _transaction(self):
        try:
            yield
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    async def register(self, email: str, full_name: str, password: str) -> Tuple[str, User]:
        """
        Create a requester account and sign a token for it.

        Raises:
            EmailTakenException: the address is already registered
        """
        email = normalize_email(email)
        try:
            async with self._transaction():
                if await self._users.get_by_email(email):
                    raise EmailTakenException()
                model = await self._users.create(
                    email=email,
                    full_name=full_name,
                    role=Role.REQUESTER.value,
                    password_hash=hash_password(password),
                )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same address
            raise EmailTakenException()

        user = to_user(model)
        logger.info("User registered", extra={"user_id": user.id, "role": user.role})
        return create_access_token(user.id, user.role, self._settings), user

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        async with self._transaction():
            model = await self._users.get_by_email(normalize_email(email))

        if model is None or not verify_password(password, model.password_hash):
            logger.info("Login rejected", extra={"reason": "invalid_credentials"})
            raise UnauthorizedException("Invalid email or password", code="INVALID_CREDENTIALS")

        user = to_user(model)
        logger.info("User logged in", extra={"user_id": user.id})
        return create_access_token(user.id, user.role, self._settings), user

    async def get_user(self, user_id: str) -> User:
        async with self._transaction():
            user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    async def list_support_team(self) -> List[User]:
        """Agents and admins, ordered by name, for assignee pickers."""
        async with self._transaction():
            return await self._users.list_by_roles()

    async def update_role(self, user_id: str, role: str, actor_id: str) -> User:
        async with self._transaction():
            model = await self._users.get_model(user_id)
            if model is None:
                raise UserNotFoundException(user_id)

            previous = model.role
            if previous != role:
                model.role = role
                model.updated_at = self._clock()

        if previous != role:
            logger.info(
                "User role changed",
                extra={"user_id": user_id, "from_role": previous, "to_role": role, "actor_id": actor_id}
            )
        return to_user(model)
