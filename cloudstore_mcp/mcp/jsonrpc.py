"""JSON-RPC 2.0 helpers for the MCP transports.

This module provides utility functions for creating JSON-RPC 2.0
responses and errors and for decoding incoming messages.
"""

import json
from typing import Any


def jsonrpc_response(id: Any, result: Any) -> dict:
    """Create a JSON-RPC 2.0 success response.

    Args:
        id: Request ID (must match the request)
        result: The result payload

    Returns:
        JSON-RPC 2.0 response dict
    """
    return {"jsonrpc": "2.0", "id": id, "result": result}


def jsonrpc_error(id: Any, code: int, message: str) -> dict:
    """Create a JSON-RPC 2.0 error response.

    Error codes used by this server:
        -32700: Parse error
        -32600: Invalid request
        -32601: Method not found
        -32602: Invalid params
        -32000: Server error (last-resort catch around dispatch)

    Args:
        id: Request ID (can be None for parse errors)
        code: Error code (negative integer)
        message: Human-readable error message

    Returns:
        JSON-RPC 2.0 error response dict
    """
    return {"jsonrpc": "2.0", "id": id, "error": {"code": code, "message": message}}


# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000  # Base for application-specific errors


class JsonRpcError(Exception):
    """Protocol-level failure carrying a JSON-RPC error code."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def parse_message(raw: str | bytes) -> Any:
    """Decode one JSON-RPC message (object or batch array).

    Raises:
        JsonRpcError: PARSE_ERROR if the text is not valid JSON
    """
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise JsonRpcError(PARSE_ERROR, f"Parse error: {e}") from e


def is_notification(request: Any) -> bool:
    """A request object without an ``id`` member expects no response."""
    return isinstance(request, dict) and "id" not in request
