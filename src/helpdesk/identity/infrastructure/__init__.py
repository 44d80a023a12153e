"""
Identity Infrastructure Layer
==============================

- Models: the users table
- Repositories: account lookups and writes
- Security: argon2 password hashing and JWT bearer tokens
"""

from helpdesk.identity.infrastructure.models import UserModel
from helpdesk.identity.infrastructure.repositories import SQLAlchemyUserRepository

__all__ = [
    "UserModel",
    "SQLAlchemyUserRepository",
]
