"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from typing import Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="helpdesk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/helpdesk",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Authentication ==========
    jwt_secret: str = Field(
        default="dev-secret-change-me",
        description="Secret used to sign bearer tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expires_minutes: int = Field(
        default=720,
        description="Bearer token lifetime in minutes",
        ge=1
    )

    # ========== SLA ==========
    sla_sweep_interval_seconds: int = Field(
        default=60,
        description="Seconds between background SLA breach sweeps (0 disables)",
        ge=0
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # ========== Rate Limiting ==========
    rate_limit_per_minute: int = Field(
        default=60,
        description="Max requests per minute per user or client address (0 disables)",
        ge=0
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Role(str, Enum):
    """User roles."""
    REQUESTER = "requester"
    AGENT = "agent"
    ADMIN = "admin"


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class EventType(str, Enum):
    """Audit timeline event types."""
    TICKET_CREATED = "TICKET_CREATED"
    TITLE_UPDATED = "TITLE_UPDATED"
    DESCRIPTION_UPDATED = "DESCRIPTION_UPDATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"
    CATEGORY_CHANGED = "CATEGORY_CHANGED"
    ASSIGNEE_CHANGED = "ASSIGNEE_CHANGED"
    COMMENT_ADDED = "COMMENT_ADDED"


# ========== Lists for validation ==========

VALID_ROLES = [role.value for role in Role]
VALID_STATUSES = [status.value for status in TicketStatus]
VALID_PRIORITIES = [priority.value for priority in TicketPriority]

SUPPORT_ROLES = [Role.AGENT.value, Role.ADMIN.value]
TERMINAL_STATUSES = [TicketStatus.RESOLVED.value, TicketStatus.CLOSED.value]

# Fields only agents and admins may set on create or update (wire names)
WORKFLOW_FIELDS = ["status", "priority", "assigneeId"]

# ========== Static tables ==========

SLA_WINDOW_HOURS: Dict[str, int] = {
    TicketPriority.URGENT.value: 2,
    TicketPriority.HIGH.value: 6,
    TicketPriority.MEDIUM.value: 12,
    TicketPriority.LOW.value: 24,
}
DEFAULT_SLA_PRIORITY = TicketPriority.MEDIUM.value

ROLE_LABELS: Dict[str, str] = {
    Role.REQUESTER.value: "Requester",
    Role.AGENT.value: "Agent",
    Role.ADMIN.value: "Admin",
}

COMMENT_EXCERPT_LENGTH = 280

IDEMPOTENCY_HEADER = "Idempotency-Key"
IDEMPOTENT_REPLAY_HEADER = "X-Idempotent-Replay"
