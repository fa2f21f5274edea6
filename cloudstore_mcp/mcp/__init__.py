"""MCP (Model Context Protocol) protocol module.

This module contains the pieces shared by both transports:
- JSON-RPC 2.0 helpers
- Tool definitions, schema validation and the tool registry
- Resource and prompt metadata
- The request dispatcher and the stdio transport

The HTTP transport lives in ``cloudstore_mcp.server``.
"""

from .dispatcher import McpDispatcher, build_tool_envelope
from .jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    JsonRpcError,
    jsonrpc_error,
    jsonrpc_response,
)
from .prompts import PROMPTS, RESOURCES, get_prompt
from .registry import ToolRegistry, ToolSpec, UnknownToolError
from .stdio import serve_stdio
from .tool_defs import TOOL_DEFINITIONS, build_default_registry

__all__ = [
    # Dispatch
    "McpDispatcher",
    "build_tool_envelope",
    "serve_stdio",
    # Tools
    "TOOL_DEFINITIONS",
    "ToolRegistry",
    "ToolSpec",
    "UnknownToolError",
    "build_default_registry",
    # Metadata
    "PROMPTS",
    "RESOURCES",
    "get_prompt",
    # JSON-RPC helpers
    "JsonRpcError",
    "jsonrpc_response",
    "jsonrpc_error",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
]
