"""Sharing tool handlers.

Handles:
- share_content: Shared links and/or collaborators for several items
- update_shared_link: Replace one item's shared link settings
- remove_shared_link: Clear one item's shared link
- update_collaborators: Change or remove collaborator roles on one item
"""

from datetime import datetime, timedelta
from typing import Any

from ...models import ShareItemResult, ShareMethod, ToolResult
from ...models.store import utcnow
from ...store.errors import InvalidArgumentError
from .base import HandlerContext, error_message, resolve_item_id, run_batch

LINK_METHODS = {ShareMethod.LINK, ShareMethod.BOTH}
COLLABORATOR_METHODS = {ShareMethod.COLLABORATOR, ShareMethod.BOTH}


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid unsharedAt timestamp: {value}") from e


async def handle_share_content(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Share every item in ``items`` by link, by collaboration, or both.

    Args:
        params: Dict containing:
            - items: List of {itemType, itemId?, path?}
            - shareMethod: link, collaborator or both
            - linkSettings: access, password, expiresIn (days), canDownload
            - collaborators: List of {email, role, notify}

    Returns:
        ToolResult with per-item ShareItemResult list
    """
    method = ShareMethod(params["shareMethod"])
    link_settings = params.get("linkSettings") or {}
    collaborators = params.get("collaborators") or []

    async def share_one(item: dict[str, Any]) -> ShareItemResult:
        item_type = item.get("itemType")
        item_id = await resolve_item_id(ctx, item_type, item.get("itemId"), item.get("path"))
        if not item_type:
            raise InvalidArgumentError("itemType is required")
        result = ShareItemResult(
            success=True, item_type=item_type, item_id=item_id, path=item.get("path")
        )

        if method in LINK_METHODS:
            expires_in = link_settings.get("expiresIn")
            link = await ctx.ledger.create_shared_link(
                item_type,
                item_id,
                access=link_settings.get("access"),
                password=link_settings.get("password"),
                can_download=link_settings.get("canDownload") is not False,
                unshared_at=utcnow() + timedelta(days=expires_in) if expires_in else None,
            )
            result.shared_link = link.url
            result.link_access = link.access
            result.unshared_at = link.unshared_at.isoformat() if link.unshared_at else None

        if method in COLLABORATOR_METHODS:
            # One ledger call per notify flag; results keep input order
            granted: list[dict[str, Any] | None] = [None] * len(collaborators)
            for notify in (True, False):
                indexes = [
                    i
                    for i, c in enumerate(collaborators)
                    if bool(c.get("notify", True)) is notify
                ]
                if not indexes:
                    continue
                added = await ctx.ledger.add_collaborators(
                    item_type,
                    item_id,
                    [
                        {
                            "email": collaborators[i]["email"],
                            "role": collaborators[i].get("role") or "viewer",
                        }
                        for i in indexes
                    ],
                    notify=notify,
                )
                for i, entry in zip(indexes, added["added"]):
                    granted[i] = entry
            result.collaborators = [entry for entry in granted if entry is not None]

        return result

    results = await run_batch(
        params.get("items") or [],
        share_one,
        lambda item, e: ShareItemResult(
            success=False,
            item_type=item.get("itemType"),
            item_id=item.get("itemId"),
            path=item.get("path"),
            error=error_message(e),
        ),
        ctx.batch_concurrency,
    )

    ok = all(r.success for r in results)
    wire = [r.to_wire() for r in results]
    return ToolResult(
        data={"success": ok, "results": wire},
        structured_content={"results": wire, "success": ok},
    )


async def handle_update_shared_link(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Replace the shared link on one item; the structured payload is the new link."""
    try:
        item_type = params["itemType"]
        item_id = await resolve_item_id(ctx, item_type, params.get("itemId"), params.get("path"))
        link = await ctx.ledger.update_shared_link(
            item_type,
            item_id,
            access=params.get("access"),
            password=params.get("password"),
            can_download=params.get("canDownload"),
            unshared_at=_parse_timestamp(params.get("unsharedAt")),
        )
    except Exception as e:
        return ToolResult.failure(error_message(e))
    return ToolResult(data={"success": True}, structured_content=link.to_wire())


async def handle_remove_shared_link(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Clear the shared link on one item."""
    try:
        item_type = params["itemType"]
        item_id = await resolve_item_id(ctx, item_type, params.get("itemId"), params.get("path"))
        removed = await ctx.ledger.remove_shared_link(item_type, item_id)
    except Exception as e:
        return ToolResult.failure(error_message(e))
    return ToolResult(data={"success": True}, structured_content=removed)


async def handle_update_collaborators(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Change or remove collaborator roles on one item.

    Emails with no matching collaboration are skipped rather than reported.
    """
    try:
        item_type = params["itemType"]
        item_id = await resolve_item_id(ctx, item_type, params.get("itemId"), params.get("path"))
        updated = await ctx.ledger.update_collaborators(
            item_type, item_id, params.get("updates") or []
        )
    except Exception as e:
        return ToolResult.failure(error_message(e))
    return ToolResult(data={"success": True}, structured_content=updated)
