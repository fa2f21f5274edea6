"""API utilities and dependencies.

This package contains shared API utilities:
- deps: FastAPI dependency injection functions
"""

from .deps import (
    bearer_token,
    get_app_settings,
    get_dispatcher,
    require_bearer_token,
    sanitize_error_message,
)

__all__ = [
    "bearer_token",
    "get_app_settings",
    "get_dispatcher",
    "require_bearer_token",
    "sanitize_error_message",
]
