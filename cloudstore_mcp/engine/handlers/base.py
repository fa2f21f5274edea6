"""Base infrastructure for tool handlers.

This module provides the common types and utilities used by all handler modules.
Each handler receives a HandlerContext with the shared backends and returns a
ToolResult.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Coroutine, TypeVar

from ...models.enums import ItemType
from ...store.errors import NotFoundError, StoreError
from ...store.paths import split_file_path

if TYPE_CHECKING:
    from ...config import Settings
    from ...models import ToolResult
    from ...store import ContentStore, DocumentAnalyzer, SharingLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class HandlerContext:
    """Context object passed to all handlers.

    Holds the backends every request shares. Built once at startup and
    handed to the dispatcher, never looked up globally.
    """

    store: "ContentStore"
    ledger: "SharingLedger"
    analyzer: "DocumentAnalyzer"
    settings: "Settings"

    @property
    def batch_concurrency(self) -> int:
        return max(int(self.settings.batch_concurrency), 1)


# Type alias for handler functions
HandlerFunc = Callable[
    [dict[str, Any], HandlerContext],
    Coroutine[Any, Any, "ToolResult"],
]


def error_message(error: Exception) -> str:
    """Message reported to the caller for a failed item or call.

    Store errors are expected outcomes; anything else is logged with its
    traceback before being reported.
    """
    if not isinstance(error, StoreError):
        logger.warning(f"Unexpected handler error: {error}", exc_info=error)
    return str(error) or type(error).__name__


async def run_batch(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    on_error: Callable[[T, Exception], R],
    concurrency: int,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    Results keep input order. An exception raised for one item becomes that
    item's ``on_error`` entry; the rest of the batch carries on.
    """
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def run_one(item: T) -> R:
        async with semaphore:
            try:
                return await worker(item)
            except Exception as e:
                logger.warning(f"Batch item failed: {e}")
                return on_error(item, e)

    return list(await asyncio.gather(*(run_one(item) for item in items)))


async def resolve_file_id(ctx: HandlerContext, path: str) -> str:
    """Resolve a file path to its ID without downloading content.

    Raises:
        NotFoundError: If the folder prefix or the file does not exist
    """
    segments, name = split_file_path(path)
    parent_id = await ctx.store.resolve_path("/".join(segments))
    handle = None
    if parent_id is not None:
        handle = await ctx.store.check_file_exists(parent_id, name)
    if handle is None:
        raise NotFoundError(f"File not found: {path}")
    return handle.id


async def resolve_item_id(
    ctx: HandlerContext,
    item_type: ItemType | str | None,
    item_id: str | None,
    path: str | None,
) -> str:
    """Return ``item_id`` or resolve ``path`` according to ``item_type``.

    Raises:
        NotFoundError: If the path does not resolve
        ValueError: If neither an ID nor a resolvable path was supplied
    """
    if item_id:
        return item_id
    if not path:
        raise ValueError("itemId or path is required")
    if not item_type:
        raise ValueError("itemType required for path resolution")
    if ItemType(item_type) == ItemType.FOLDER:
        folder_id = await ctx.store.resolve_path(path)
        if folder_id is None:
            raise NotFoundError(f"Folder not found: {path}")
        return folder_id
    return await resolve_file_id(ctx, path)
