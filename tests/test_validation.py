"""
Tests for tool schemas, compile-once validation and the tool registry.
"""

import pytest
from jsonschema.exceptions import SchemaError

from cloudstore_mcp.mcp import TOOL_DEFINITIONS, ToolRegistry, ToolSpec, UnknownToolError
from cloudstore_mcp.mcp.validation import SchemaValidatorCache, compile_schema
from cloudstore_mcp.models import ToolName, ToolResult


# ============================================================================
# SCHEMAS
# ============================================================================


class TestToolDefinitions:
    def test_every_tool_is_defined_once(self) -> None:
        names = [d["name"] for d in TOOL_DEFINITIONS]
        assert sorted(names) == sorted(t.value for t in ToolName)
        assert len(set(names)) == len(names)

    @pytest.mark.parametrize("definition", TOOL_DEFINITIONS, ids=lambda d: str(d["name"]))
    def test_schemas_compile(self, definition) -> None:
        compile_schema(definition["inputSchema"])

    def test_invalid_schema_rejected(self) -> None:
        with pytest.raises(SchemaError):
            compile_schema({"type": "not-a-type"})


class TestValidatorCache:
    def test_compiles_once_per_name(self) -> None:
        cache = SchemaValidatorCache()
        schema = {"type": "object", "required": ["a"]}
        for _ in range(5):
            cache.errors("t", schema, {})
        assert cache.compile_count == 1
        cache.errors("other", schema, {})
        assert cache.compile_count == 2

    def test_reports_every_violation(self) -> None:
        cache = SchemaValidatorCache()
        schema = {
            "type": "object",
            "properties": {"n": {"type": "integer"}, "s": {"type": "string"}},
            "required": ["req"],
        }
        errors = cache.errors("t", schema, {"n": "x", "s": 1})
        assert len(errors) == 3
        assert any(e.startswith("(root)") and "'req' is a required property" in e for e in errors)
        assert any(e.startswith("/n ") for e in errors)
        assert any(e.startswith("/s ") for e in errors)

    def test_email_format_is_checked(self) -> None:
        cache = SchemaValidatorCache()
        schema = {"type": "string", "format": "email"}
        assert cache.errors("t", schema, "user@example.com") == []
        assert cache.errors("t", schema, "not-an-email") != []


# ============================================================================
# REGISTRY
# ============================================================================


def _counting_registry():
    calls: list[dict] = []

    async def handler(params, ctx):
        calls.append(params)
        return ToolResult(data={"success": True})

    registry = ToolRegistry(
        [
            ToolSpec(
                name="echo",
                description="Echo",
                input_schema={
                    "type": "object",
                    "properties": {"text": {"type": "string"}},
                    "required": ["text"],
                },
                handler=handler,
            )
        ]
    )
    return registry, calls


class TestRegistry:
    async def test_valid_arguments_reach_handler(self, ctx) -> None:
        registry, calls = _counting_registry()
        result = await registry.call("echo", {"text": "hi"}, ctx)
        assert result.data == {"success": True}
        assert calls == [{"text": "hi"}]

    async def test_missing_argument_skips_handler(self, ctx) -> None:
        registry, calls = _counting_registry()
        result = await registry.call("echo", {}, ctx)
        assert result.is_error is True
        assert "Invalid arguments for echo" in result.text
        assert "'text' is a required property" in result.text
        assert calls == []

    async def test_validator_reused_across_calls(self, ctx) -> None:
        registry, _ = _counting_registry()
        for _ in range(3):
            await registry.call("echo", {"text": "x"}, ctx)
        await registry.call("echo", {}, ctx)
        assert registry.validators.compile_count == 1

    async def test_unknown_tool(self, ctx) -> None:
        registry, _ = _counting_registry()
        with pytest.raises(UnknownToolError):
            await registry.call("nope", {}, ctx)

    def test_duplicate_registration(self) -> None:
        registry, _ = _counting_registry()
        with pytest.raises(ValueError):
            registry.register(registry.get("echo"))

    def test_default_registry_lists_all_tools(self, registry) -> None:
        assert len(registry) == len(ToolName)
        listed = registry.list_tools()
        assert {t["name"] for t in listed} == {t.value for t in ToolName}
        assert all(set(t) == {"name", "description", "inputSchema"} for t in listed)


class TestToolSchemas:
    async def test_read_document_requires_exactly_one_address(self, registry, ctx) -> None:
        both = await registry.call(
            ToolName.READ_DOCUMENT, {"fileId": "fil_1", "path": "a.txt"}, ctx
        )
        neither = await registry.call(ToolName.READ_DOCUMENT, {}, ctx)
        assert both.is_error and neither.is_error

    async def test_share_content_item_needs_id_or_path(self, registry, ctx) -> None:
        result = await registry.call(
            ToolName.SHARE_CONTENT,
            {"items": [{"itemType": "file"}], "shareMethod": "link"},
            ctx,
        )
        assert result.is_error
        assert "/items/0" in result.text

    async def test_share_content_rejects_bad_email(self, registry, ctx) -> None:
        result = await registry.call(
            ToolName.SHARE_CONTENT,
            {
                "items": [{"itemType": "file", "itemId": "fil_1"}],
                "shareMethod": "collaborator",
                "collaborators": [{"email": "nobody"}],
            },
            ctx,
        )
        assert result.is_error
        assert "/collaborators/0/email" in result.text

    async def test_update_shared_link_requires_item_type(self, registry, ctx) -> None:
        result = await registry.call(ToolName.UPDATE_SHARED_LINK, {"itemId": "fil_1"}, ctx)
        assert result.is_error

    async def test_analyze_requires_type_and_target(self, registry, ctx) -> None:
        result = await registry.call(ToolName.ANALYZE_DOCUMENT, {"fileId": "fil_1"}, ctx)
        assert result.is_error
        result = await registry.call(
            ToolName.ANALYZE_DOCUMENT, {"analysisType": "explain", "fileId": "fil_1"}, ctx
        )
        assert result.is_error

    async def test_manage_folders_action_enum(self, registry, ctx) -> None:
        result = await registry.call(
            ToolName.MANAGE_FOLDERS, {"action": "copy", "folders": []}, ctx
        )
        assert result.is_error
        assert "/action" in result.text
