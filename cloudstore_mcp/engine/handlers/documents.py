"""Document tool handlers.

Handles:
- save_documents: Batch upload with folder creation and overwrite guard
- retrieve_documents: Batch download by file ID or path
- read_document: Read one document without saving it anywhere
"""

import base64
import logging
from typing import Any

from ...models import (
    FileSummary,
    RetrieveDocumentsResult,
    RetrieveItemResult,
    SaveDocumentsResult,
    SaveItemResult,
    ToolResult,
)
from ...store.base import ROOT_FOLDER_ID
from ...store.errors import InvalidArgumentError, NotFoundError
from ...store.paths import normalize_path, split_file_path
from .base import HandlerContext, error_message, resolve_file_id, run_batch

logger = logging.getLogger(__name__)

BASE64_MARKER = "base64,"


def decode_content(content: Any) -> bytes:
    """Bytes for a document's ``content`` string.

    Anything after a ``base64,`` marker (as in data URLs) is base64-decoded;
    other strings are encoded as UTF-8.
    """
    if not isinstance(content, str):
        raise InvalidArgumentError("No content provided")
    if BASE64_MARKER in content:
        return base64.b64decode(content.split(BASE64_MARKER, 1)[1])
    return content.encode("utf-8")


def encode_content(content: bytes, as_text: bool) -> str:
    if as_text:
        return content.decode("utf-8", errors="replace")
    return base64.b64encode(content).decode("ascii")


# ============ SAVE ============


async def handle_save_documents(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Save documents to the store, one independent upload per item.

    Args:
        params: Dict containing:
            - documents: List of {path, content}
            - options.overwrite: Replace existing files (default False)
            - options.createFolders: Create missing parent folders (default True)

    Returns:
        ToolResult with SaveDocumentsResult
    """
    options = params.get("options") or {}
    overwrite = bool(options.get("overwrite", False))
    create_folders = options.get("createFolders") is not False

    async def save_one(doc: dict[str, Any]) -> SaveItemResult:
        path = doc.get("path", "")
        segments, file_name = split_file_path(path)
        folder_path = "/".join(segments)

        if not folder_path:
            parent_id = ROOT_FOLDER_ID
        elif create_folders:
            parent_id = await ctx.store.ensure_folder_path(folder_path)
        else:
            parent_id = await ctx.store.resolve_path(folder_path)
            if parent_id is None:
                raise NotFoundError(f"Folder not found: {normalize_path(folder_path)}")

        content = decode_content(doc.get("content"))
        if not overwrite and await ctx.store.check_file_exists(parent_id, file_name):
            return SaveItemResult(path=path, success=False, error="File already exists")

        uploaded = await ctx.store.upload_file(parent_id, file_name, content)
        return SaveItemResult(path=path, success=True, file_id=uploaded.id, size=uploaded.size)

    results = await run_batch(
        params.get("documents") or [],
        save_one,
        lambda doc, e: SaveItemResult(
            path=doc.get("path", ""), success=False, error=error_message(e)
        ),
        ctx.batch_concurrency,
    )

    saved = sum(1 for r in results if r.success)
    result = SaveDocumentsResult(
        success=all(r.success for r in results),
        saved=saved,
        failed=len(results) - saved,
        results=results,
    )
    logger.info(f"save_documents: {result.saved} saved, {result.failed} failed")
    return ToolResult(data=result.to_wire())


# ============ RETRIEVE ============


async def handle_retrieve_documents(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Download several documents by ID or path.

    Args:
        params: Dict containing:
            - documents: List of {fileId} or {path}
            - options.asText: Decode as UTF-8 (default True), else base64

    Returns:
        ToolResult with RetrieveDocumentsResult
    """
    as_text = (params.get("options") or {}).get("asText") is not False

    async def retrieve_one(doc: dict[str, Any]) -> RetrieveItemResult:
        file_id = doc.get("fileId")
        path = doc.get("path")
        if file_id:
            content = await ctx.store.get_file_content(file_id)
            name = None
        elif path:
            found = await ctx.store.get_file_by_path(path)
            if found is None:
                raise NotFoundError(f"File not found: {path}")
            file_id, name, content = found.id, found.name, found.content
        else:
            raise InvalidArgumentError("fileId or path is required")
        return RetrieveItemResult(
            success=True,
            file_id=file_id,
            path=path,
            name=name,
            size=len(content),
            content=encode_content(content, as_text),
        )

    results = await run_batch(
        params.get("documents") or [],
        retrieve_one,
        lambda doc, e: RetrieveItemResult(
            success=False,
            file_id=doc.get("fileId"),
            path=doc.get("path"),
            error=error_message(e),
        ),
        ctx.batch_concurrency,
    )

    retrieved = sum(1 for r in results if r.success)
    result = RetrieveDocumentsResult(
        success=all(r.success for r in results),
        retrieved=retrieved,
        failed=len(results) - retrieved,
        results=results,
    )
    return ToolResult(data=result.to_wire())


# ============ READ ============


async def handle_read_document(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Read one document's content by ``fileId`` or ``path``."""
    try:
        file_id = params.get("fileId")
        name = None
        path = params.get("path")
        if not file_id and path:
            file_id = await resolve_file_id(ctx, path)
            name = split_file_path(path)[1]
        if not file_id:
            raise InvalidArgumentError("fileId or path is required")

        content = await ctx.store.get_file_content(file_id)
        as_text = (params.get("options") or {}).get("asText") is not False
        file = FileSummary(id=file_id, name=name, size=len(content)).to_wire()
        return ToolResult(
            data={"success": True, "file": file},
            structured_content={"file": file, "text": encode_content(content, as_text)},
        )
    except Exception as e:
        return ToolResult.failure(error_message(e))
