"""
Identity Infrastructure Repositories
=====================================

SQLAlchemy access to user accounts.
"""

from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import SUPPORT_ROLES
from helpdesk.identity.domain.entities import User
from helpdesk.identity.infrastructure.models import UserModel


def parse_uuid(value: Optional[str]) -> Optional[UUID]:
    """Parse an id from the wire; malformed ids behave like missing rows."""
    if value is None:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def to_user(model: UserModel) -> User:
    return User(
        id=str(model.id),
        email=model.email,
        full_name=model.full_name,
        role=model.role,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyUserRepository:
    """
    SQLAlchemy implementation of the user repository.

    Writes flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_model(self, user_id: str) -> Optional[UserModel]:
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            return None
        result = await self._session.execute(select(UserModel).where(UserModel.id == user_uuid))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        model = await self.get_model(user_id)
        return to_user(model) if model else None

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        return result.scalar_one_or_none()

    async def exists(self, user_id: str) -> bool:
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            return False
        result = await self._session.execute(select(UserModel.id).where(UserModel.id == user_uuid))
        return result.scalar_one_or_none() is not None

    async def create(self, email: str, full_name: str, role: str, password_hash: str) -> UserModel:
        model = UserModel(
            id=uuid4(),
            email=email,
            full_name=full_name,
            role=role,
            password_hash=password_hash,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def list_by_roles(self, roles: Iterable[str] = SUPPORT_ROLES) -> List[User]:
        stmt = (
            select(UserModel)
            .where(UserModel.role.in_(list(roles)))
            .order_by(UserModel.full_name.asc(), UserModel.email.asc())
        )
        result = await self._session.execute(stmt)
        return [to_user(model) for model in result.scalars().all()]

    async def get_many(self, user_ids: Iterable[str]) -> List[User]:
        uuids = [uid for uid in (parse_uuid(value) for value in user_ids) if uid is not None]
        if not uuids:
            return []
        result = await self._session.execute(select(UserModel).where(UserModel.id.in_(uuids)))
        return [to_user(model) for model in result.scalars().all()]
