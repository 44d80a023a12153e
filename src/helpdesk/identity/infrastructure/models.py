"""
Identity Infrastructure Models
===============================

SQLAlchemy ORM model for user accounts.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.config import Role
from helpdesk.core.clock import utc_now
from helpdesk.infrastructure.database import Base, UTCDateTime


class UserModel(Base):
    """
    Database model for User entity.

    Maps to the 'users' table. ``email`` is stored lower-cased, so the
    unique index makes addresses case-insensitively unique.
    """
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.REQUESTER.value)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
