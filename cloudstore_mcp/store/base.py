"""Hierarchical store interface.

Two implementations exist: ``InMemoryStore`` (the reference model, also the
test fixture) and ``RemoteStore`` (a client for the remote content API).
Both address content by opaque ID or by slash-delimited path.

Lookups that can legitimately miss (``resolve_path``, ``check_file_exists``,
``get_file_by_path``) return ``None``. Everything else raises a
``StoreError`` subclass.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from ..models.enums import ItemType, SearchItemType, SearchSortBy, SortDirection, TreeSortBy
from ..models.store import (
    FileContent,
    FileHandle,
    FolderEntry,
    FolderRecord,
    SearchResult,
    TreeNode,
)
from .paths import join_path, normalize_path, split_path

ROOT_FOLDER_ID = "0"

_EPOCH = datetime.min.replace(tzinfo=UTC)


def compile_name_pattern(pattern: str | None) -> Callable[[str], bool]:
    """Build a case-insensitive glob matcher (``*`` any run, ``?`` one char)."""
    if not pattern:
        return lambda name: True
    regex = "".join(
        ".*" if ch == "*" else "." if ch == "?" else re.escape(ch) for ch in pattern
    )
    compiled = re.compile(f"^{regex}$", re.IGNORECASE | re.DOTALL)
    return lambda name: compiled.match(name) is not None


def sort_entries(entries: Iterable[FolderEntry], sort_by: TreeSortBy | str) -> list[FolderEntry]:
    """Sort folder children by name, size, modification time or type."""
    key = TreeSortBy(sort_by or TreeSortBy.NAME)
    if key == TreeSortBy.SIZE:
        return sorted(entries, key=lambda e: e.size or 0)
    if key == TreeSortBy.DATE:
        return sorted(entries, key=lambda e: e.modified_at or _EPOCH)
    if key == TreeSortBy.TYPE:
        return sorted(entries, key=lambda e: e.type.value)
    return sorted(entries, key=lambda e: (e.name.casefold(), e.name))


class ContentStore(ABC):
    """Folder/file graph addressed by ID or path."""

    root_id: str = ROOT_FOLDER_ID

    # ============ PATH RESOLUTION ============

    @abstractmethod
    async def resolve_path(self, path: str | None) -> str | None:
        """Resolve a folder path to its ID; the empty path and ``/`` are the root."""

    @abstractmethod
    async def ensure_folder_path(self, path: str, description: str | None = None) -> str:
        """Resolve a folder path, creating missing segments. Idempotent."""

    @abstractmethod
    async def get_folder(self, folder_id: str) -> FolderRecord:
        """Fetch a folder record. Raises ``NotFoundError``."""

    @abstractmethod
    async def list_children(self, folder_id: str) -> list[FolderEntry]:
        """List folders and files directly inside a folder."""

    # ============ FOLDER MUTATIONS ============

    @abstractmethod
    async def move_folder(
        self, folder_id: str, new_parent_id: str, new_name: str | None = None
    ) -> None:
        """Reparent a folder, optionally renaming it in the same step.

        Nothing changes when the final name is taken under ``new_parent_id``.
        Every descendant path is re-derived.
        """

    @abstractmethod
    async def rename_folder(self, folder_id: str, new_name: str) -> None:
        """Rename a folder, re-deriving every descendant path."""

    @abstractmethod
    async def delete_folder(self, folder_id: str, recursive: bool = False) -> None:
        """Delete a folder; non-empty folders require ``recursive``."""

    # ============ FILES ============

    @abstractmethod
    async def upload_file(self, parent_id: str, file_name: str, content: bytes) -> FileHandle:
        """Create or overwrite (same ID) the named file under ``parent_id``."""

    @abstractmethod
    async def check_file_exists(self, parent_id: str, file_name: str) -> FileHandle | None:
        """Find a file by name directly inside a folder."""

    @abstractmethod
    async def get_file_by_path(self, path: str) -> FileContent | None:
        """Resolve ``folder/.../name`` to a file and its content."""

    @abstractmethod
    async def get_file_content(self, file_id: str) -> bytes:
        """Download file bytes. Raises ``NotFoundError``."""

    # ============ SEARCH ============

    @abstractmethod
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
        """Find folders and files by name, content, extension and ancestry."""

    # ============ TREE ============

    async def build_tree(
        self,
        start_id: str,
        start_path: str,
        max_depth: int,
        *,
        include_files: bool = True,
        include_sizes: bool = True,
        include_modified: bool = True,
        name_pattern: str | None = None,
        sort_by: TreeSortBy | str = TreeSortBy.NAME,
        depth: int = 0,
    ) -> TreeNode | None:
        """Build a nested tree below ``start_id``, at most ``max_depth`` levels deep.

        At ``depth >= max_depth`` nothing is returned, so the caller omits that
        subtree. Children are filtered by ``name_pattern`` before inclusion.
        """
        if depth >= max_depth:
            return None

        matches = compile_name_pattern(name_pattern)
        entries = sort_entries(await self.list_children(start_id), sort_by)
        children: list[TreeNode] = []

        for entry in entries:
            if not matches(entry.name):
                continue
            child_path = join_path(normalize_path(start_path), entry.name)
            if entry.type == ItemType.FOLDER:
                subtree = await self.build_tree(
                    entry.id,
                    child_path,
                    max_depth,
                    include_files=include_files,
                    include_sizes=include_sizes,
                    include_modified=include_modified,
                    name_pattern=name_pattern,
                    sort_by=sort_by,
                    depth=depth + 1,
                )
                if subtree is None:
                    continue
                if include_modified:
                    subtree.modified_at = entry.modified_at
                children.append(subtree)
            elif include_files:
                children.append(
                    TreeNode(
                        id=entry.id,
                        name=entry.name,
                        path=child_path,
                        type=ItemType.FILE,
                        size=entry.size if include_sizes else None,
                        modified_at=entry.modified_at if include_modified else None,
                    )
                )

        segments = split_path(start_path)
        return TreeNode(
            id=start_id,
            name=segments[-1] if segments else "/",
            path=normalize_path(start_path),
            type=ItemType.FOLDER,
            children=children,
        )

    async def aclose(self) -> None:
        """Release backend resources. No-op for stores without any."""
