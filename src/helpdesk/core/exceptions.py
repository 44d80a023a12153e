"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

Every exception carries a machine-readable ``code`` and the HTTP
``status_code`` it maps to, so the outermost boundary can render the
error envelope without knowing individual exception types.
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(message)


class ValidationException(ApplicationException):
    """Exception for validation errors."""

    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidStatusException(ValidationException):
    """Ticket status outside the enumerated set."""

    code = "INVALID_STATUS"

    def __init__(self, value: Any, field: Optional[str] = "status"):
        super().__init__(f"Invalid ticket status '{value}'", field, {"value": value})


class InvalidPriorityException(ValidationException):
    """Ticket priority outside the enumerated set."""

    code = "INVALID_PRIORITY"

    def __init__(self, value: Any, field: Optional[str] = "priority"):
        super().__init__(f"Invalid ticket priority '{value}'", field, {"value": value})


class UnauthorizedException(ApplicationException):
    """Missing or invalid credentials."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        code: Optional[str] = None
    ):
        if code:
            self.code = code
        super().__init__(message)


class ForbiddenException(ApplicationException):
    """Authenticated, but the role or ownership check failed."""

    code = "FORBIDDEN"
    status_code = 403


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details=details)


class TicketNotFoundException(ResourceNotFoundException):
    code = "TICKET_NOT_FOUND"

    def __init__(self, ticket_id: Optional[str] = None):
        super().__init__("Ticket", ticket_id)


class UserNotFoundException(ResourceNotFoundException):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class ConflictException(ApplicationException):
    """Request conflicts with the current state of a resource."""

    code = "CONFLICT"
    status_code = 409


class VersionConflictException(ConflictException):
    """Optimistic concurrency check failed; client must refetch and retry."""

    code = "VERSION_MISMATCH"

    def __init__(self, ticket_id: str, expected_version: int, current_version: int):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            "Ticket has been modified by another process",
            "version",
            {
                "ticket_id": ticket_id,
                "expected_version": expected_version,
                "current_version": current_version,
            }
        )


class EmailTakenException(ConflictException):
    code = "EMAIL_TAKEN"

    def __init__(self):
        super().__init__("Email already registered", "email")
