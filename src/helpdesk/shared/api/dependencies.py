"""Request-scoped dependencies shared by routers."""

from fastapi import Request

from helpdesk.config import Settings
from helpdesk.core.clock import Clock, utc_now


def get_clock() -> Clock:
    """Time source for services; overridden in tests to move time forward."""
    return utc_now


def get_settings(request: Request) -> Settings:
    """Settings the running app was built with (see ``create_app``)."""
    return request.app.state.settings
