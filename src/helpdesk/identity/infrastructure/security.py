"""Password hashing and bearer token signing."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from helpdesk.config import VALID_ROLES, Settings
from helpdesk.core.exceptions import UnauthorizedException
from helpdesk.identity.domain.entities import Principal

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

BEARER_PREFIX = "bearer "


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


# =============================================================================
# Access tokens (JWT)
# =============================================================================

def create_access_token(user_id: str, role: str, settings: Settings) -> str:
    """
    Create an access token signed with ``settings.jwt_secret``.

    The token carries the subject id and role; role changes take effect
    on the next login.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Principal:
    """
    Verify a token and return the caller it identifies.

    Raises:
        UnauthorizedException: code INVALID_TOKEN for bad signatures,
            expired tokens and malformed claims
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError:
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")

    subject = claims.get("sub")
    role = claims.get("role")
    if not subject or role not in VALID_ROLES:
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN")
    return Principal(user_id=subject, role=role)


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def peek_subject(authorization: Optional[str], settings: Settings) -> Optional[str]:
    """Best-effort subject lookup for rate limiting and idempotency records."""
    token = extract_bearer(authorization)
    if token is None:
        return None
    try:
        return decode_access_token(token, settings).user_id
    except UnauthorizedException:
        return None
