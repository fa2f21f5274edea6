"""
Tests for JSON-RPC dispatch and the tools/call response envelope.
"""

import json

from cloudstore_mcp.mcp import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    McpDispatcher,
    ToolRegistry,
    ToolSpec,
    build_tool_envelope,
)
from cloudstore_mcp.mcp.dispatcher import PROTOCOL_VERSION
from cloudstore_mcp.models import ToolResult
from tests.helpers import rpc, tool_call


# ============================================================================
# ENVELOPE
# ============================================================================


class TestEnvelope:
    def test_structured_payload_is_text_and_promoted(self) -> None:
        raw = ToolResult(
            data={"success": True},
            structured_content={"totalResults": 1, "results": [{"id": "x"}], "other": 1},
        )
        env = build_tool_envelope(raw)
        assert env["structuredContent"] == raw.structured_content
        assert json.loads(env["content"][0]["text"]) == raw.structured_content
        assert env["content"][0]["type"] == "text"
        assert env["totalResults"] == 1
        assert env["results"] == [{"id": "x"}]
        assert "other" not in env
        assert env["success"] is True
        assert "isError" not in env

    def test_raw_fields_win_over_aliases(self) -> None:
        raw = ToolResult(
            data={"success": True, "path": "/raw"},
            structured_content={"path": "/structured", "tree": {}},
        )
        env = build_tool_envelope(raw)
        assert env["path"] == "/raw"
        assert env["tree"] == {}

    def test_without_structured_payload_text_is_raw_json(self) -> None:
        raw = ToolResult(data={"success": True, "saved": 2})
        env = build_tool_envelope(raw)
        assert json.loads(env["content"][0]["text"]) == {"success": True, "saved": 2}
        assert "structuredContent" not in env

    def test_error_text_and_flag(self) -> None:
        env = build_tool_envelope(ToolResult.failure("File not found: x"))
        assert env["isError"] is True
        assert env["content"][0]["text"] == "File not found: x"
        assert env["success"] is False
        assert env["error"] == "File not found: x"

    def test_raw_content_field_never_replaces_envelope_content(self) -> None:
        env = build_tool_envelope(ToolResult(data={"content": "raw text"}))
        assert isinstance(env["content"], list)


# ============================================================================
# PROTOCOL METHODS
# ============================================================================


class TestProtocolMethods:
    async def test_initialize(self, dispatcher) -> None:
        response = await dispatcher.handle(rpc("initialize", {}))
        result = response["result"]
        assert response["id"] == 1
        assert result["protocolVersion"] == PROTOCOL_VERSION
        assert set(result["capabilities"]) == {"tools", "resources", "prompts"}
        assert result["serverInfo"]["name"] == "cloudstore-mcp"

    async def test_ping(self, dispatcher) -> None:
        assert (await dispatcher.handle(rpc("ping")))["result"] == {}

    async def test_tools_list(self, dispatcher) -> None:
        response = await dispatcher.handle(rpc("tools/list"))
        assert len(response["result"]["tools"]) == 11

    async def test_resources_and_prompts_list(self, dispatcher) -> None:
        resources = (await dispatcher.handle(rpc("resources/list")))["result"]["resources"]
        prompts = (await dispatcher.handle(rpc("prompts/list")))["result"]["prompts"]
        assert "box://folder/root/tree" in {r["uri"] for r in resources}
        assert {p["name"] for p in prompts} == {
            "share_file",
            "analyze_document",
            "organize_folder",
            "bulk_upload",
            "collaboration_setup",
        }

    async def test_prompts_get(self, dispatcher) -> None:
        response = await dispatcher.handle(
            rpc("prompts/get", {"name": "share_file", "arguments": {"fileId": "fil_1"}})
        )
        message = response["result"]["messages"][0]
        assert message["role"] == "user"
        assert "fil_1" in message["content"]["text"]
        assert "update_shared_link" in message["content"]["text"]

    async def test_prompts_get_without_name(self, dispatcher) -> None:
        response = await dispatcher.handle(rpc("prompts/get", {}))
        assert response["error"]["code"] == INVALID_PARAMS
        assert response["error"]["message"] == "Missing required parameter: name"

    async def test_prompts_get_unknown(self, dispatcher) -> None:
        response = await dispatcher.handle(rpc("prompts/get", {"name": "nope"}))
        assert response["error"]["code"] == INVALID_PARAMS
        assert "Unknown prompt" in response["error"]["message"]

    async def test_unknown_method(self, dispatcher) -> None:
        response = await dispatcher.handle(rpc("tools/delete", id="abc"))
        assert response == {
            "jsonrpc": "2.0",
            "id": "abc",
            "error": {"code": METHOD_NOT_FOUND, "message": "Method not found"},
        }

    async def test_invalid_request_shape(self, dispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "id": 3})
        assert response["error"]["code"] == INVALID_REQUEST
        assert response["id"] == 3


# ============================================================================
# TOOLS/CALL
# ============================================================================


class TestToolsCall:
    async def test_save_then_search_round(self, dispatcher) -> None:
        saved = await dispatcher.handle(
            tool_call(
                "save_documents",
                {"documents": [{"path": "Search/X/alpha.txt", "content": "alpha"}]},
            )
        )
        assert saved["result"]["saved"] == 1

        found = await dispatcher.handle(
            tool_call("search_content", {"query": "alpha", "filters": {"type": "file"}}, id=2)
        )
        result = found["result"]
        assert result["totalResults"] == 1
        assert result["results"][0]["name"] == "alpha.txt"
        assert result["structuredContent"]["totalResults"] == 1

    async def test_read_document_promotes_text(self, dispatcher) -> None:
        await dispatcher.handle(
            tool_call("save_documents", {"documents": [{"path": "r.md", "content": "body"}]})
        )
        response = await dispatcher.handle(tool_call("read_document", {"path": "r.md"}))
        result = response["result"]
        assert result["text"] == "body"
        assert result["file"]["name"] == "r.md"
        assert result["content"][0]["type"] == "text"

    async def test_validation_failure_is_tool_error(self, dispatcher) -> None:
        response = await dispatcher.handle(tool_call("search_content", {}))
        result = response["result"]
        assert result["isError"] is True
        assert "'query' is a required property" in result["content"][0]["text"]

    async def test_domain_failure_is_not_rpc_error(self, dispatcher) -> None:
        response = await dispatcher.handle(
            tool_call("explore_storage", {"path": "/missing"})
        )
        assert "error" not in response
        assert response["result"]["success"] is False
        assert response["result"]["isError"] is True

    async def test_unknown_tool(self, dispatcher) -> None:
        response = await dispatcher.handle(tool_call("format_disk", {}))
        assert response["error"]["code"] == INVALID_PARAMS
        assert response["error"]["message"] == "Unknown tool: format_disk"

    async def test_handler_crash_becomes_server_error(self, ctx) -> None:
        async def explode(params, ctx):
            raise RuntimeError("boom")

        tool = ToolSpec(
            name="explode", description="", input_schema={"type": "object"}, handler=explode
        )
        registry = ToolRegistry([tool])
        dispatcher = McpDispatcher(registry, ctx)
        response = await dispatcher.handle(tool_call("explode", {}))
        assert response["error"]["code"] == SERVER_ERROR
        assert response["error"]["message"] == "boom"

        # The dispatcher keeps serving afterwards
        assert (await dispatcher.handle(rpc("ping", id=2)))["result"] == {}


# ============================================================================
# MESSAGES, NOTIFICATIONS AND BATCHES
# ============================================================================


class TestMessages:
    async def test_notification_has_no_response(self, dispatcher) -> None:
        notification = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert await dispatcher.handle(notification) is None

    async def test_notification_still_runs(self, dispatcher, store) -> None:
        request = tool_call("manage_folders", {"action": "create", "folders": [{"path": "N"}]})
        del request["id"]
        assert await dispatcher.handle(request) is None
        assert await store.resolve_path("N") is not None

    async def test_parse_error(self, dispatcher) -> None:
        response = await dispatcher.handle_text("{not json")
        assert response["id"] is None
        assert response["error"]["code"] == PARSE_ERROR

    async def test_batch(self, dispatcher) -> None:
        responses = await dispatcher.handle_text(
            json.dumps([rpc("ping", id=1), {"jsonrpc": "2.0", "method": "ping"}, rpc("nope", id=2)])
        )
        assert [r["id"] for r in responses] == [1, 2]
        assert responses[1]["error"]["code"] == METHOD_NOT_FOUND

    async def test_empty_batch(self, dispatcher) -> None:
        response = await dispatcher.handle_payload([])
        assert response["error"]["code"] == INVALID_REQUEST

    async def test_all_notification_batch(self, dispatcher) -> None:
        assert await dispatcher.handle_payload([{"jsonrpc": "2.0", "method": "ping"}]) is None
