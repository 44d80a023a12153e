"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from helpdesk.core.clock import Clock, utc_now
from helpdesk.core.exceptions import (
    ApplicationException,
    ValidationException,
    InvalidStatusException,
    InvalidPriorityException,
    UnauthorizedException,
    ForbiddenException,
    ResourceNotFoundException,
    TicketNotFoundException,
    UserNotFoundException,
    ConflictException,
    VersionConflictException,
    EmailTakenException,
)

__all__ = [
    "Clock",
    "utc_now",
    "ApplicationException",
    "ValidationException",
    "InvalidStatusException",
    "InvalidPriorityException",
    "UnauthorizedException",
    "ForbiddenException",
    "ResourceNotFoundException",
    "TicketNotFoundException",
    "UserNotFoundException",
    "ConflictException",
    "VersionConflictException",
    "EmailTakenException",
]
