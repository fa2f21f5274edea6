"""Request builders shared by the protocol and transport tests."""

from typing import Any


def rpc(method: str, params: dict[str, Any] | None = None, id: Any = 1) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 request object."""
    request: dict[str, Any] = {"jsonrpc": "2.0", "id": id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def tool_call(name: str, arguments: dict[str, Any], id: Any = 1) -> dict[str, Any]:
    """Build a tools/call request."""
    return rpc("tools/call", {"name": name, "arguments": arguments}, id=id)
