"""Search tool handler.

Handles:
- search_content: Query folders and files by name, content, extension and ancestry
"""

from typing import Any

from ...models import SearchItemType, SearchSortBy, SortDirection, ToolResult
from .base import HandlerContext, error_message

DEFAULT_SEARCH_LIMIT = 20


async def handle_search_content(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Search the store.

    ``totalResults`` is the full match count, which may exceed the number of
    returned ``results`` when ``options.limit`` truncates the page.

    Args:
        params: Dict containing:
            - query: Text matched against names (and content when enabled)
            - filters: type, extensions, folders (ancestor paths)
            - options: limit, includeContent, includeTrashed, sortBy, direction

    Returns:
        ToolResult with {totalResults, results}
    """
    filters = params.get("filters") or {}
    options = params.get("options") or {}
    try:
        found = await ctx.store.search(
            query=params.get("query"),
            type=filters.get("type") or SearchItemType.ALL,
            extensions=filters.get("extensions"),
            ancestor_paths=filters.get("folders"),
            include_content=options.get("includeContent") is not False,
            include_trashed=bool(options.get("includeTrashed")),
            limit=int(options.get("limit") or DEFAULT_SEARCH_LIMIT),
            sort_by=options.get("sortBy") or SearchSortBy.RELEVANCE,
            direction=options.get("direction") or SortDirection.DESC,
        )
    except Exception as e:
        return ToolResult.failure(error_message(e))

    results = [entry.to_wire() for entry in found.entries]
    return ToolResult(
        data={"success": True, "totalResults": found.total_count, "results": results},
        structured_content={"totalResults": found.total_count, "results": results},
    )
