"""FastAPI dependency injection functions.

This module contains shared dependencies for the HTTP transport:
- Access to the dispatcher and settings held on ``app.state``
- Bearer token validation
- Error sanitization
"""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException
from fastapi import Request as FastAPIRequest

from ..config import Settings
from ..mcp.dispatcher import McpDispatcher

logger = logging.getLogger(__name__)


# ============ ERROR SANITIZATION ============


def sanitize_error_message(error: Exception) -> str:
    """
    Sanitize error messages to prevent information disclosure.

    Returns a generic message for unexpected errors while preserving
    useful information for known error types.
    """
    error_str = str(error)

    # Known safe error patterns that can be returned to client
    safe_patterns = [
        "Unauthorized",
        "Payload too large",
        "Parse error",
        "Invalid Request",
        "Method not found",
        "Unknown tool",
        "Unknown prompt",
    ]

    for pattern in safe_patterns:
        if pattern.lower() in error_str.lower():
            return error_str

    # Log the actual error for debugging
    logger.error(f"Request handling error: {error}", exc_info=error)

    return "An error occurred processing your request. Please try again."


# ============ APP STATE ============


def get_dispatcher(request: FastAPIRequest) -> McpDispatcher:
    """Dispatcher built at startup and stored on the application."""
    return request.app.state.dispatcher


def get_app_settings(request: FastAPIRequest) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


# ============ AUTHENTICATION ============


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_bearer_token(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request with 401 unless it carries the configured token.

    No check is made when ``AUTH_TOKEN`` is unset.
    """
    expected = settings.auth_token
    if not expected:
        return

    token = bearer_token(authorization)
    if token is None or not hmac.compare_digest(token.encode(), expected.encode()):
        logger.info("Rejected request with missing or invalid bearer token")
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
