"""Remote implementations of the store, ledger and analyzer.

Each operation translates into one or more calls against a Box-style REST
API via ``ApiClient``. Path addressing is implemented client-side by
walking folder listings from the root, exactly as the in-memory store
does over its parent index.
"""

import json
import logging
from datetime import datetime
from typing import Any

from ..models.enums import ItemType, SearchItemType, SearchSortBy, SortDirection
from ..models.store import (
    AIAnswer,
    AIExtraction,
    Collaboration,
    FileContent,
    FileHandle,
    FolderEntry,
    FolderRecord,
    SearchEntry,
    SearchResult,
    SharedLink,
    utcnow,
)
from .ai import DocumentAnalyzer
from .base import ROOT_FOLDER_ID, ContentStore
from .client import ApiClient
from .errors import AlreadyExistsError, NotFoundError
from .ledger import SharingLedger
from .paths import ROOT_PATH, join_path, split_path, validate_name

logger = logging.getLogger(__name__)

ITEM_FIELDS = "id,name,type,size,modified_at"
DETAIL_FIELDS = "id,name,type,size,modified_at,description,parent,path_collection,shared_link"


def _path_of(item: dict[str, Any]) -> str:
    """Derive an absolute path from ``path_collection`` (root excluded) plus name."""
    path = ROOT_PATH
    for ancestor in (item.get("path_collection") or {}).get("entries") or []:
        if ancestor.get("id") == ROOT_FOLDER_ID:
            continue
        path = join_path(path, ancestor["name"])
    if item.get("id") == ROOT_FOLDER_ID:
        return ROOT_PATH
    return join_path(path, item["name"])


def _entry(item: dict[str, Any]) -> FolderEntry:
    return FolderEntry(
        id=item["id"],
        name=item["name"],
        type=ItemType(item["type"]),
        size=item.get("size"),
        modified_at=item.get("modified_at"),
    )


def _shared_link(raw: dict[str, Any] | None) -> SharedLink | None:
    if not raw:
        return None
    return SharedLink(
        url=raw.get("url") or "",
        access=raw.get("access") or raw.get("effective_access"),
        unshared_at=raw.get("unshared_at"),
        can_download=(raw.get("permissions") or {}).get("can_download"),
        is_password_enabled=bool(raw.get("is_password_enabled")),
    )


# ============ STORE ============


class RemoteStore(ContentStore):
    """``ContentStore`` over the remote folder/file endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def _items(self, folder_id: str) -> list[dict[str, Any]]:
        return await self.client.paginate(
            f"/folders/{folder_id}/items", params={"fields": ITEM_FIELDS}
        )

    async def _find_child(self, parent_id: str, name: str, item_type: ItemType) -> dict | None:
        return next(
            (
                e
                for e in await self._items(parent_id)
                if e.get("type") == item_type.value and e.get("name") == name
            ),
            None,
        )

    async def _walk(self, segments: list[str]) -> str | None:
        current = ROOT_FOLDER_ID
        for segment in segments:
            child = await self._find_child(current, segment, ItemType.FOLDER)
            if child is None:
                return None
            current = child["id"]
        return current

    # ============ PATH RESOLUTION ============

    async def resolve_path(self, path: str | None) -> str | None:
        return await self._walk(split_path(path))

    async def ensure_folder_path(self, path: str, description: str | None = None) -> str:
        current = ROOT_FOLDER_ID
        for segment in split_path(path):
            child = await self._find_child(current, segment, ItemType.FOLDER)
            if child is not None:
                current = child["id"]
                continue
            body: dict[str, Any] = {"name": segment, "parent": {"id": current}}
            if description:
                body["description"] = description
            try:
                created = await self.client.json("POST", "/folders", json=body)
            except AlreadyExistsError:
                # Lost a race with a concurrent creator; adopt its folder.
                child = await self._find_child(current, segment, ItemType.FOLDER)
                if child is None:
                    raise
                created = child
            logger.debug(f"Created remote folder {segment} under {current}")
            current = created["id"]
        return current

    async def get_folder(self, folder_id: str) -> FolderRecord:
        item = await self.client.json(
            "GET", f"/folders/{folder_id}", params={"fields": DETAIL_FIELDS}
        )
        parent = item.get("parent") or {}
        return FolderRecord(
            id=item["id"],
            parent_id=parent.get("id"),
            name=item.get("name") or "",
            path=_path_of(item),
            description=item.get("description") or None,
            modified_at=item.get("modified_at") or utcnow(),
            shared_link=_shared_link(item.get("shared_link")),
        )

    async def list_children(self, folder_id: str) -> list[FolderEntry]:
        return [_entry(e) for e in await self._items(folder_id) if e.get("type") != "web_link"]

    # ============ FOLDER MUTATIONS ============

    async def move_folder(
        self, folder_id: str, new_parent_id: str, new_name: str | None = None
    ) -> None:
        body: dict[str, Any] = {"parent": {"id": new_parent_id}}
        if new_name is not None:
            body["name"] = validate_name(new_name)
        await self.client.json("PUT", f"/folders/{folder_id}", json=body)

    async def rename_folder(self, folder_id: str, new_name: str) -> None:
        validate_name(new_name)
        await self.client.json("PUT", f"/folders/{folder_id}", json={"name": new_name})

    async def delete_folder(self, folder_id: str, recursive: bool = False) -> None:
        await self.client.request(
            "DELETE",
            f"/folders/{folder_id}",
            params={"recursive": "true" if recursive else "false"},
        )

    # ============ FILES ============

    async def upload_file(self, parent_id: str, file_name: str, content: bytes) -> FileHandle:
        validate_name(file_name)
        existing = await self.check_file_exists(parent_id, file_name)
        files = {"file": (file_name, content, "application/octet-stream")}
        if existing is not None:
            uploaded = await self.client.upload(f"/files/{existing.id}/content", files=files)
        else:
            uploaded = await self.client.upload(
                "/files/content",
                data={"attributes": _attributes(file_name, parent_id)},
                files=files,
            )
        entry = (uploaded.get("entries") or [uploaded])[0]
        return FileHandle(id=entry["id"], size=entry.get("size", len(content)))

    async def check_file_exists(self, parent_id: str, file_name: str) -> FileHandle | None:
        match = await self._find_child(parent_id, file_name, ItemType.FILE)
        if match is None:
            return None
        return FileHandle(id=match["id"], size=match.get("size") or 0)

    async def get_file_by_path(self, path: str) -> FileContent | None:
        segments = split_path(path)
        if not segments:
            return None
        parent_id = await self._walk(segments[:-1])
        if parent_id is None:
            return None
        handle = await self.check_file_exists(parent_id, segments[-1])
        if handle is None:
            return None
        content = await self.get_file_content(handle.id)
        return FileContent(id=handle.id, name=segments[-1], size=len(content), content=content)

    async def get_file_content(self, file_id: str) -> bytes:
        response = await self.client.request("GET", f"/files/{file_id}/content")
        return response.content

    # ============ SEARCH ============

    async def search(
        self,
        query: str | None = None,
        type: SearchItemType | str = SearchItemType.ALL,
        extensions: list[str] | None = None,
        ancestor_paths: list[str] | None = None,
        include_content: bool = True,
        include_trashed: bool = False,
        limit: int = 20,
        sort_by: SearchSortBy | str = SearchSortBy.RELEVANCE,
        direction: SortDirection | str = SortDirection.DESC,
    ) -> SearchResult:
        params: dict[str, Any] = {
            "query": query or "",
            "limit": limit,
            "fields": DETAIL_FIELDS,
            "content_types": "name,file_content" if include_content else "name",
            "trash_content": "all_items" if include_trashed else "non_trashed_only",
            "sort": SearchSortBy(sort_by or SearchSortBy.RELEVANCE).value,
            "direction": SortDirection(direction or SortDirection.DESC).value,
        }
        item_type = SearchItemType(type or SearchItemType.ALL)
        if item_type != SearchItemType.ALL:
            params["type"] = item_type.value
        if extensions:
            params["file_extensions"] = ",".join(e.lower().lstrip(".") for e in extensions)
        if ancestor_paths:
            ancestor_ids = [
                folder_id
                for folder_id in [await self.resolve_path(p) for p in ancestor_paths]
                if folder_id is not None
            ]
            if not ancestor_ids:
                return SearchResult(total_count=0, entries=[])
            params["ancestor_folder_ids"] = ",".join(ancestor_ids)

        page = await self.client.json("GET", "/search", params=params)
        entries = [
            SearchEntry(
                id=item["id"],
                type=ItemType(item["type"]),
                name=item["name"],
                path=_path_of(item),
                parent_id=(item.get("parent") or {}).get("id"),
                size=item.get("size"),
                modified_at=item.get("modified_at"),
            )
            for item in page.get("entries") or []
            if item.get("type") in (ItemType.FILE, ItemType.FOLDER)
        ]
        return SearchResult(total_count=page.get("total_count", len(entries)), entries=entries)

    async def aclose(self) -> None:
        await self.client.aclose()


def _attributes(name: str, parent_id: str) -> str:
    return json.dumps({"name": name, "parent": {"id": parent_id}})


# ============ LEDGER ============


class RemoteLedger(SharingLedger):
    """Shared links via the item ``shared_link`` field, collaborations via /collaborations."""

    def __init__(self, client: ApiClient):
        self.client = client

    @staticmethod
    def _item_url(item_type: ItemType | str, item_id: str) -> str:
        return f"/{ItemType(item_type).value}s/{item_id}"

    async def create_shared_link(
        self,
        item_type: ItemType | str,
        item_id: str,
        access: str | None = None,
        password: str | None = None,
        can_download: bool | None = None,
        unshared_at: datetime | None = None,
    ) -> SharedLink:
        link: dict[str, Any] = {"access": access or "company"}
        if password:
            link["password"] = password
        if unshared_at is not None:
            link["unshared_at"] = unshared_at.isoformat()
        if can_download is not None:
            link["permissions"] = {"can_download": can_download}
        item = await self.client.json(
            "PUT",
            self._item_url(item_type, item_id),
            params={"fields": "shared_link"},
            json={"shared_link": link},
        )
        shared = _shared_link(item.get("shared_link"))
        if shared is None:
            raise NotFoundError(f"No shared link returned for {item_type} {item_id}")
        return shared

    async def remove_shared_link(self, item_type: ItemType | str, item_id: str) -> dict[str, Any]:
        await self.client.json(
            "PUT",
            self._item_url(item_type, item_id),
            params={"fields": "shared_link"},
            json={"shared_link": None},
        )
        return {"removed": True}

    async def _collaborations(self, item_type: ItemType | str, item_id: str) -> list[dict]:
        return await self.client.paginate(f"{self._item_url(item_type, item_id)}/collaborations")

    @staticmethod
    def _match(entries: list[dict], email: str) -> dict | None:
        wanted = email.casefold()
        return next(
            (
                e
                for e in entries
                if ((e.get("accessible_by") or {}).get("login") or "").casefold() == wanted
            ),
            None,
        )

    async def add_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        collaborators: list[dict[str, Any]],
        notify: bool = True,
    ) -> dict[str, Any]:
        existing = await self._collaborations(item_type, item_id)
        added: list[dict[str, Any]] = []
        for collaborator in collaborators:
            email = collaborator["email"]
            role = collaborator.get("role") or "viewer"
            current = self._match(existing, email)
            if current is not None:
                collab = await self.client.json(
                    "PUT", f"/collaborations/{current['id']}", json={"role": role}
                )
            else:
                collab = await self.client.json(
                    "POST",
                    "/collaborations",
                    params={"notify": "true" if notify else "false"},
                    json={
                        "item": {"type": ItemType(item_type).value, "id": item_id},
                        "accessible_by": {"type": "user", "login": email},
                        "role": role,
                    },
                )
            added.append({"id": collab.get("id"), "email": email, "role": role})
        return {"added": added}

    async def update_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        updates: list[dict[str, Any]],
    ) -> dict[str, Any]:
        existing = await self._collaborations(item_type, item_id)
        updated: list[dict[str, Any]] = []
        for change in updates:
            email = change["email"]
            current = self._match(existing, email)
            if current is None:
                continue
            if change.get("remove"):
                await self.client.request("DELETE", f"/collaborations/{current['id']}")
                updated.append({"email": email, "removed": True})
            elif change.get("role"):
                await self.client.json(
                    "PUT", f"/collaborations/{current['id']}", json={"role": change["role"]}
                )
                updated.append({"email": email, "role": change["role"]})
        return {"updated": updated}

    async def list_collaborators(
        self, item_type: ItemType | str, item_id: str
    ) -> list[Collaboration]:
        return [
            Collaboration(
                id=e["id"],
                item_type=ItemType(item_type),
                item_id=item_id,
                email=(e.get("accessible_by") or {}).get("login") or "",
                role=e.get("role") or "viewer",
            )
            for e in await self._collaborations(item_type, item_id)
        ]


# ============ ANALYZER ============


class RemoteAnalyzer(DocumentAnalyzer):
    """Document analysis through the remote /ai endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    @staticmethod
    def _items(file_ids: list[str]) -> list[dict[str, str]]:
        return [{"id": file_id, "type": "file"} for file_id in file_ids]

    async def text_gen(
        self,
        file_id: str,
        prompt: str,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        body: dict[str, Any] = {"prompt": prompt, "items": self._items([file_id])}
        if dialogue_history:
            body["dialogue_history"] = dialogue_history
        data = await self.client.json("POST", "/ai/text_gen", json=body)
        return AIAnswer(answer=data.get("answer") or "")

    async def ask(
        self,
        file_ids: list[str],
        prompt: str,
        mode: str = "single_item_qa",
        include_citations: bool = False,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        body: dict[str, Any] = {
            "mode": mode,
            "prompt": prompt,
            "items": self._items(file_ids),
            "include_citations": include_citations,
        }
        if dialogue_history:
            body["dialogue_history"] = dialogue_history
        data = await self.client.json("POST", "/ai/ask", json=body)
        return AIAnswer(answer=data.get("answer") or "", citations=data.get("citations"))

    async def extract(self, file_ids: list[str], prompt: str) -> AIAnswer:
        data = await self.client.json(
            "POST", "/ai/extract", json={"prompt": prompt, "items": self._items(file_ids)}
        )
        return AIAnswer(answer=data.get("answer") or "")

    async def extract_structured(
        self,
        file_ids: list[str],
        fields: list[dict[str, Any]] | None = None,
        metadata_template: dict[str, Any] | None = None,
    ) -> AIExtraction:
        body: dict[str, Any] = {"items": self._items(file_ids)}
        if metadata_template:
            body["metadata_template"] = metadata_template
        if fields:
            body["fields"] = fields
        data = await self.client.json("POST", "/ai/extract_structured", json=body)
        answer = data.get("answer", data)
        return AIExtraction(fields=answer if isinstance(answer, dict) else {"answer": answer})
