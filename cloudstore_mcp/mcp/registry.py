"""Tool registry: a closed mapping from tool name to definition and handler.

Built once at startup from ``TOOL_DEFINITIONS`` and the handler table.
Calling a tool validates its arguments before the handler runs.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..engine.handlers import HandlerContext, HandlerFunc
from ..models import ToolResult
from .validation import SchemaValidatorCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    """One registered tool."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: HandlerFunc

    def definition(self) -> dict[str, Any]:
        """Entry returned by tools/list."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class UnknownToolError(KeyError):
    """No tool is registered under the requested name."""


class ToolRegistry:
    """Name-keyed tools with compile-once argument validation."""

    def __init__(self, tools: list[ToolSpec] | None = None):
        self._tools: dict[str, ToolSpec] = {}
        self.validators = SchemaValidatorCache()
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolSpec) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolSpec:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.definition() for tool in self._tools.values()]

    async def call(self, name: str, arguments: Any, ctx: HandlerContext) -> ToolResult:
        """Validate ``arguments`` and run the tool's handler.

        A validation failure returns an ``is_error`` result listing every
        violation; the handler is not invoked.

        Raises:
            UnknownToolError: If ``name`` is not registered
        """
        tool = self.get(name)
        errors = self.validators.errors(tool.name, tool.input_schema, arguments)
        if errors:
            logger.info(f"Rejected arguments for {tool.name}: {len(errors)} error(s)")
            return ToolResult(
                is_error=True,
                text=f"Invalid arguments for {tool.name}:\n" + "\n".join(errors),
                structured_content={"errors": errors},
            )
        return await tool.handler(arguments, ctx)
