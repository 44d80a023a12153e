"""
Shared API Schemas
==================

Base model for camelCase JSON and the success envelope every route returns.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case names still work in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[T]):
    """Success envelope: ``{"data": ...}``."""
    data: T


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")
    field: Optional[str] = Field(None, description="Offending input field, when known")


class ErrorEnvelope(BaseModel):
    """Error envelope: ``{"error": {...}}``. Used for OpenAPI docs."""
    error: ErrorBody


# Documented error responses shared by every router
ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope, "description": "Invalid input"},
    401: {"model": ErrorEnvelope, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorEnvelope, "description": "Role or ownership check failed"},
    404: {"model": ErrorEnvelope, "description": "Resource not found"},
    409: {"model": ErrorEnvelope, "description": "Conflicting state"},
    429: {"model": ErrorEnvelope, "description": "Rate limit exceeded"},
}
