"""SQLAlchemy access to stored idempotent responses."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.identity.infrastructure.repositories import parse_uuid
from helpdesk.idempotency.infrastructure.models import IdempotencyRecordModel


class SQLAlchemyIdempotencyRepository:

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> Optional[IdempotencyRecordModel]:
        result = await self._session.execute(
            select(IdempotencyRecordModel).where(IdempotencyRecordModel.key == key)
        )
        return result.scalar_one_or_none()

    async def save(
        self,
        key: str,
        user_id: Optional[str],
        method: str,
        path: str,
        request_hash: str,
        response_body: str,
        status_code: int,
        now: datetime,
    ) -> None:
        """Insert, or overwrite a record written by a concurrent first attempt."""
        await self._session.merge(
            IdempotencyRecordModel(
                key=key,
                user_id=parse_uuid(user_id),
                method=method,
                path=path,
                request_hash=request_hash,
                response_body=response_body,
                status_code=status_code,
                created_at=now,
            )
        )
        await self._session.flush()
