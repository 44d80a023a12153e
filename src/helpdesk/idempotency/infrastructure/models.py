"""
Idempotency Infrastructure Models
==================================

Stored responses for replaying retried requests.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.core.clock import utc_now
from helpdesk.infrastructure.database import Base, UTCDateTime


class IdempotencyRecordModel(Base):
    """
    Maps to the 'idempotency_keys' table.

    Keyed by the client-supplied key alone. ``response_body`` holds the
    exact bytes sent the first time, decoded as UTF-8.
    """
    __tablename__ = "idempotency_keys"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    request_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    response_body: Mapped[str] = mapped_column(Text, nullable=False)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
