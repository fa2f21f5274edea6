"""
Tests for share_content, update_shared_link, remove_shared_link and update_collaborators.
"""

from datetime import datetime, timedelta

import pytest

from cloudstore_mcp.engine.handlers import (
    handle_remove_shared_link,
    handle_share_content,
    handle_update_collaborators,
    handle_update_shared_link,
)
from cloudstore_mcp.models.store import utcnow
from cloudstore_mcp.store import ROOT_FOLDER_ID


@pytest.fixture
async def file_id(store) -> str:
    folder_id = await store.ensure_folder_path("Shared")
    return (await store.upload_file(folder_id, "plan.md", b"plan")).id


class TestShareContent:
    async def test_link_by_path(self, ctx, store, file_id) -> None:
        result = await handle_share_content(
            {
                "items": [{"itemType": "file", "path": "Shared/plan.md"}],
                "shareMethod": "link",
                "linkSettings": {"access": "open", "expiresIn": 7},
            },
            ctx,
        )
        data = result.data
        assert data["success"] is True
        (item,) = data["results"]
        assert item["itemId"] == file_id
        assert item["linkAccess"] == "open"
        assert item["sharedLink"] == store.files[file_id].shared_link.url
        expires = datetime.fromisoformat(item["unsharedAt"])
        assert timedelta(days=6) < expires - utcnow() <= timedelta(days=7)
        assert "collaborators" not in item

    async def test_collaborators_on_folder(self, ctx, ledger, store) -> None:
        folder_id = await store.ensure_folder_path("Team")
        result = await handle_share_content(
            {
                "items": [{"itemType": "folder", "itemId": folder_id}],
                "shareMethod": "collaborator",
                "collaborators": [
                    {"email": "a@example.com", "role": "editor", "notify": False},
                    {"email": "b@example.com"},
                ],
            },
            ctx,
        )
        (item,) = result.data["results"]
        assert [(c["email"], c["role"]) for c in item["collaborators"]] == [
            ("a@example.com", "editor"),
            ("b@example.com", "viewer"),
        ]
        assert "sharedLink" not in item
        assert len(await ledger.list_collaborators("folder", folder_id)) == 2

    async def test_notify_is_per_collaborator(self, ctx, file_id, monkeypatch) -> None:
        calls: list[tuple[list[str], bool]] = []
        add_collaborators = ctx.ledger.add_collaborators

        async def recording(item_type, item_id, collaborators, notify=True):
            calls.append(([c["email"] for c in collaborators], notify))
            return await add_collaborators(item_type, item_id, collaborators, notify=notify)

        monkeypatch.setattr(ctx.ledger, "add_collaborators", recording)
        result = await handle_share_content(
            {
                "items": [{"itemType": "file", "itemId": file_id}],
                "shareMethod": "collaborator",
                "collaborators": [
                    {"email": "quiet@example.com", "notify": False},
                    {"email": "loud@example.com"},
                    {"email": "hush@example.com", "notify": False},
                ],
            },
            ctx,
        )
        assert sorted(calls) == [
            (["loud@example.com"], True),
            (["quiet@example.com", "hush@example.com"], False),
        ]
        (item,) = result.data["results"]
        assert [c["email"] for c in item["collaborators"]] == [
            "quiet@example.com",
            "loud@example.com",
            "hush@example.com",
        ]

    async def test_both_methods(self, ctx, file_id) -> None:
        result = await handle_share_content(
            {
                "items": [{"itemType": "file", "itemId": file_id}],
                "shareMethod": "both",
                "collaborators": [{"email": "c@example.com"}],
            },
            ctx,
        )
        (item,) = result.data["results"]
        assert item["linkAccess"] == "company"
        assert item["collaborators"][0]["email"] == "c@example.com"

    async def test_unresolvable_item_does_not_abort(self, ctx, file_id) -> None:
        result = await handle_share_content(
            {
                "items": [
                    {"itemType": "file", "path": "Shared/missing.md"},
                    {"itemType": "file", "itemId": file_id},
                    {"itemType": "folder", "path": "Ghost"},
                ],
                "shareMethod": "link",
            },
            ctx,
        )
        data = result.data
        assert data["success"] is False
        assert [r["success"] for r in data["results"]] == [False, True, False]
        assert data["results"][0]["error"] == "File not found: Shared/missing.md"
        assert data["results"][2]["error"] == "Folder not found: Ghost"

    async def test_unknown_id_reports_not_found(self, ctx) -> None:
        result = await handle_share_content(
            {"items": [{"itemType": "file", "itemId": "fil_404"}], "shareMethod": "link"},
            ctx,
        )
        assert result.data["results"][0]["error"] == "File not found: fil_404"


class TestSingleItemTools:
    async def test_update_shared_link(self, ctx, store, file_id) -> None:
        result = await handle_update_shared_link(
            {
                "itemType": "file",
                "itemId": file_id,
                "access": "collaborators",
                "canDownload": False,
                "unsharedAt": "2031-05-01T00:00:00Z",
            },
            ctx,
        )
        assert result.data == {"success": True}
        link = result.structured_content
        assert link["access"] == "collaborators"
        assert link["canDownload"] is False
        assert link["unsharedAt"].startswith("2031-05-01T00:00:00")
        assert store.files[file_id].shared_link.url == link["url"]

    async def test_update_shared_link_bad_timestamp(self, ctx, file_id) -> None:
        result = await handle_update_shared_link(
            {"itemType": "file", "itemId": file_id, "unsharedAt": "next tuesday"}, ctx
        )
        assert result.is_error is True
        assert result.data["error"] == "Invalid unsharedAt timestamp: next tuesday"

    async def test_remove_shared_link_by_path(self, ctx, store) -> None:
        folder_id = await store.ensure_folder_path("Public")
        await ctx.ledger.create_shared_link("folder", folder_id)
        result = await handle_remove_shared_link({"itemType": "folder", "path": "/Public"}, ctx)
        assert result.structured_content == {"removed": True}
        assert store.folders[folder_id].shared_link is None

    async def test_remove_shared_link_unknown_item(self, ctx) -> None:
        result = await handle_remove_shared_link({"itemType": "file", "itemId": "fil_404"}, ctx)
        assert result.is_error is True
        assert result.data["success"] is False

    async def test_update_collaborators(self, ctx, file_id) -> None:
        await ctx.ledger.add_collaborators("file", file_id, [{"email": "a@example.com"}])
        result = await handle_update_collaborators(
            {
                "itemType": "file",
                "path": "Shared/plan.md",
                "updates": [
                    {"email": "a@example.com", "role": "editor"},
                    {"email": "ghost@example.com", "remove": True},
                ],
            },
            ctx,
        )
        assert result.structured_content == {
            "updated": [{"email": "a@example.com", "role": "editor"}]
        }

    async def test_root_folder_can_be_shared(self, ctx) -> None:
        result = await handle_update_shared_link(
            {"itemType": "folder", "itemId": ROOT_FOLDER_ID}, ctx
        )
        assert result.data == {"success": True}
