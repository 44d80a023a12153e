"""
Identity Application DTOs
==========================

Request and response models for registration, login and role management.
"""

from datetime import datetime
from typing import List, Literal

from pydantic import EmailStr, Field, field_validator

from helpdesk.shared.api.schemas import CamelModel

RoleStr = Literal["requester", "agent", "admin"]


# ========== Request DTOs ==========

class RegisterRequest(CamelModel):
    """Self-service registration; new accounts are always requesters."""
    email: EmailStr = Field(..., description="Login email (case-insensitive)")
    full_name: str = Field(..., min_length=1, max_length=200, description="Display name")
    password: str = Field(..., min_length=8, max_length=128, description="Plain-text password")

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("fullName must not be blank")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RoleUpdateRequest(CamelModel):
    role: RoleStr = Field(..., description="New role")


# ========== Response DTOs ==========

class UserResponse(CamelModel):
    id: str
    email: str
    full_name: str
    role: RoleStr
    role_label: str
    created_at: datetime


class AuthResponse(CamelModel):
    token: str = Field(..., description="Bearer token")
    user: UserResponse


class SupportMemberResponse(CamelModel):
    id: str
    full_name: str
    email: str
    role: RoleStr


class SupportTeamResponse(CamelModel):
    members: List[SupportMemberResponse]
