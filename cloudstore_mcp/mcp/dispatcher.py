"""JSON-RPC method dispatch for the MCP server.

``McpDispatcher`` is constructed once with its registry and handler context
and then shared by every transport. Requests are independent; the only
state they share is the backends held by the context.
"""

import json
import logging
from typing import Any

from .. import __version__
from ..engine.handlers import HandlerContext
from ..models import ToolResult
from .jsonrpc import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    SERVER_ERROR,
    JsonRpcError,
    is_notification,
    jsonrpc_error,
    jsonrpc_response,
    parse_message,
)
from .prompts import PROMPTS, RESOURCES, UnknownPromptError, get_prompt
from .registry import ToolRegistry, UnknownToolError

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "cloudstore-mcp"

# Structured-payload fields copied to the top level of a tools/call result
PROMOTED_ALIASES = (
    "totalResults",
    "results",
    "tree",
    "path",
    "analysisType",
    "answer",
    "citations",
    "fields",
    "targetLanguage",
    "file",
    "text",
)

# Envelope keys a handler's raw fields may not shadow
ENVELOPE_KEYS = ("content", "structuredContent", "isError")


def build_tool_envelope(raw: ToolResult) -> dict[str, Any]:
    """Shape a handler result into the tools/call response.

    The text projection is the explicit text (error message) when present,
    else the serialized structured payload, else the serialized raw fields.
    Promoted aliases never overwrite a field the handler set itself.
    """
    structured = raw.structured_content
    extra = {k: v for k, v in raw.data.items() if k not in ENVELOPE_KEYS}

    if raw.text is not None:
        text = raw.text
    elif structured is not None:
        text = json.dumps(structured, default=str)
    else:
        text = json.dumps(extra, default=str)

    if structured:
        for key in PROMOTED_ALIASES:
            if key in structured and key not in extra:
                extra[key] = structured[key]

    envelope: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if structured is not None:
        envelope["structuredContent"] = structured
    if raw.is_error:
        envelope["isError"] = True
    envelope.update(extra)
    return envelope


class McpDispatcher:
    """Routes JSON-RPC requests to protocol methods and tools."""

    def __init__(self, registry: ToolRegistry, ctx: HandlerContext):
        self.registry = registry
        self.ctx = ctx
        self._methods = {
            "initialize": self._initialize,
            "ping": self._ping,
            "notifications/initialized": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "resources/list": self._resources_list,
            "prompts/list": self._prompts_list,
            "prompts/get": self._prompts_get,
        }

    # ============ ENTRY POINTS ============

    async def handle(self, request: Any) -> dict | None:
        """Dispatch one request object.

        Returns:
            The response dict, or None for notifications (no ``id``)
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            req_id = request.get("id") if isinstance(request, dict) else None
            return jsonrpc_error(req_id, INVALID_REQUEST, "Invalid Request")

        req_id = request.get("id")
        method = request["method"]
        try:
            result = await self._route(method, request.get("params"))
            response = jsonrpc_response(req_id, result)
        except JsonRpcError as e:
            response = jsonrpc_error(req_id, e.code, e.message)
        except Exception as e:
            logger.error(f"Unhandled error while dispatching {method}: {e}", exc_info=True)
            response = jsonrpc_error(req_id, SERVER_ERROR, str(e) or "Server error")

        if is_notification(request):
            return None
        return response

    async def handle_payload(self, payload: Any) -> dict | list | None:
        """Dispatch a decoded message: a single request or a batch array."""
        if not isinstance(payload, list):
            return await self.handle(payload)
        if not payload:
            return jsonrpc_error(None, INVALID_REQUEST, "Invalid Request: empty batch")
        responses = [await self.handle(item) for item in payload]
        return [r for r in responses if r is not None] or None

    async def handle_text(self, raw: str | bytes) -> dict | list | None:
        """Decode and dispatch one serialized message."""
        try:
            payload = parse_message(raw)
        except JsonRpcError as e:
            return jsonrpc_error(None, e.code, e.message)
        return await self.handle_payload(payload)

    # ============ ROUTING ============

    async def _route(self, method: str, params: Any) -> Any:
        handler = self._methods.get(method)
        if handler is None:
            raise JsonRpcError(METHOD_NOT_FOUND, "Method not found")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise JsonRpcError(INVALID_PARAMS, "params must be an object")
        return await handler(params)

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "prompts": {"listChanged": False},
            },
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": self.registry.list_tools()}

    async def _resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": RESOURCES}

    async def _prompts_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"prompts": PROMPTS}

    async def _prompts_get(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not name:
            raise JsonRpcError(INVALID_PARAMS, "Missing required parameter: name")
        try:
            return get_prompt(str(name), params.get("arguments") or {})
        except UnknownPromptError as e:
            raise JsonRpcError(INVALID_PARAMS, f"Unknown prompt: {name}") from e

    async def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not name:
            raise JsonRpcError(INVALID_PARAMS, "Missing required parameter: name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        try:
            raw = await self.registry.call(str(name), arguments, self.ctx)
        except UnknownToolError as e:
            raise JsonRpcError(INVALID_PARAMS, f"Unknown tool: {name}") from e
        return build_tool_envelope(raw)
