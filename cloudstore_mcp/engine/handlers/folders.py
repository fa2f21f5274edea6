"""Folder tool handlers.

Handles:
- manage_folders: Create, move, rename or delete folders by path or ID
- explore_storage: Depth-bounded tree of folders and files below a path
"""

import logging
from typing import Any

from ...models import FolderAction, FolderActionResult, ToolResult, TreeSortBy
from ...store.base import ROOT_FOLDER_ID
from ...store.errors import InvalidArgumentError, NotFoundError
from ...store.paths import is_under, normalize_path, split_path
from .base import HandlerContext, error_message, run_batch

logger = logging.getLogger(__name__)

DEFAULT_TREE_DEPTH = 2


async def _target_folder_id(ctx: HandlerContext, entry: dict[str, Any]) -> str:
    if entry.get("folderId"):
        return entry["folderId"]
    path = entry.get("path")
    if not path:
        raise InvalidArgumentError("folderId or path is required")
    folder_id = await ctx.store.resolve_path(path)
    if folder_id is None:
        raise NotFoundError(f"Folder not found: {path}")
    return folder_id


async def _create(ctx: HandlerContext, entry: dict[str, Any]) -> FolderActionResult:
    path = entry.get("path")
    if not path:
        raise InvalidArgumentError("path required")
    folder_id = await ctx.store.ensure_folder_path(path, entry.get("description"))
    return FolderActionResult(
        action=FolderAction.CREATE.value,
        success=True,
        folder_id=folder_id,
        path=normalize_path(path),
    )


async def _rename(ctx: HandlerContext, entry: dict[str, Any]) -> FolderActionResult:
    folder_id = await _target_folder_id(ctx, entry)
    new_name = entry.get("newName")
    if not new_name:
        raise InvalidArgumentError("newName required")
    await ctx.store.rename_folder(folder_id, new_name)
    folder = await ctx.store.get_folder(folder_id)
    return FolderActionResult(
        action=FolderAction.RENAME.value,
        success=True,
        folder_id=folder_id,
        new_name=new_name,
        new_path=folder.path,
    )


async def _move(ctx: HandlerContext, entry: dict[str, Any]) -> FolderActionResult:
    """Move to ``newPath``: parents are ensured, the last segment is the new name."""
    folder_id = await _target_folder_id(ctx, entry)
    segments = split_path(entry.get("newPath"))
    if not segments:
        raise InvalidArgumentError("newPath required")
    *parent_segments, new_name = segments

    # Rejected before any destination parent is created
    folder = await ctx.store.get_folder(folder_id)
    if is_under(normalize_path(entry["newPath"]), folder.path):
        raise InvalidArgumentError("Cannot move a folder into its own subtree")

    new_parent_id = ROOT_FOLDER_ID
    if parent_segments:
        new_parent_id = await ctx.store.ensure_folder_path("/".join(parent_segments))

    await ctx.store.move_folder(folder_id, new_parent_id, new_name=new_name)
    return FolderActionResult(
        action=FolderAction.MOVE.value,
        success=True,
        folder_id=folder_id,
        new_path=normalize_path(entry["newPath"]),
    )


async def _delete(ctx: HandlerContext, entry: dict[str, Any]) -> FolderActionResult:
    folder_id = await _target_folder_id(ctx, entry)
    await ctx.store.delete_folder(folder_id, recursive=entry.get("recursive", True))
    return FolderActionResult(action=FolderAction.DELETE.value, success=True, folder_id=folder_id)


FOLDER_ACTIONS = {
    FolderAction.CREATE: _create,
    FolderAction.RENAME: _rename,
    FolderAction.MOVE: _move,
    FolderAction.DELETE: _delete,
}


async def handle_manage_folders(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Apply one folder action to every entry of ``folders``.

    Args:
        params: Dict containing:
            - action: create, move, rename or delete
            - folders: List of {path?, folderId?, newPath?, newName?, description?, recursive?}

    Returns:
        ToolResult with per-entry FolderActionResult list
    """
    action = FolderAction(params["action"])
    apply = FOLDER_ACTIONS[action]

    results = await run_batch(
        params.get("folders") or [],
        lambda entry: apply(ctx, entry),
        lambda entry, e: FolderActionResult(
            action=action.value,
            success=False,
            path=entry.get("path"),
            folder_id=entry.get("folderId"),
            error=error_message(e),
        ),
        ctx.batch_concurrency,
    )

    ok = all(r.success for r in results)
    wire = [r.to_wire() for r in results]
    logger.info(f"manage_folders {action}: {sum(r.success for r in results)}/{len(results)} ok")
    return ToolResult(
        data={"success": ok, "results": wire},
        structured_content={"results": wire, "success": ok},
    )


async def handle_explore_storage(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Return a tree of folders (and optionally files) starting at ``path``.

    Args:
        params: Dict containing:
            - path: Start folder (default "/")
            - options: depth, includeFiles, includeSizes, includeModified, pattern, sortBy

    Returns:
        ToolResult with {path, tree}
    """
    path = normalize_path(params.get("path") or "/")
    options = params.get("options") or {}
    try:
        folder_id = await ctx.store.resolve_path(path)
        if folder_id is None:
            raise NotFoundError(f"Path not found: {path}")
        tree = await ctx.store.build_tree(
            folder_id,
            path,
            int(options.get("depth", DEFAULT_TREE_DEPTH)),
            include_files=options.get("includeFiles", True),
            include_sizes=options.get("includeSizes", True),
            include_modified=options.get("includeModified", True),
            name_pattern=options.get("pattern"),
            sort_by=options.get("sortBy") or TreeSortBy.NAME,
        )
    except Exception as e:
        return ToolResult.failure(error_message(e))

    wire_tree = tree.to_wire() if tree is not None else None
    return ToolResult(
        data={"success": True, "path": path, "tree": wire_tree},
        structured_content={"path": path, "tree": wire_tree},
    )
