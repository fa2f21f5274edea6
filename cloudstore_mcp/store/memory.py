"""In-memory reference implementation of the hierarchical store.

Folders and files live in ID-keyed maps, each record holding its parent ID,
so descendant path propagation is a walk over the parent index. All public
operations run under a single ``asyncio.Lock``; the sharing ledger built on
top of this store takes the same lock.
"""

import asyncio
import itertools
import logging

from ..models.enums import ItemType, SearchItemType, SearchSortBy, SortDirection
from ..models.store import (
    Collaboration,
    FileContent,
    FileHandle,
    FileRecord,
    FolderEntry,
    FolderRecord,
    SearchEntry,
    SearchResult,
    utcnow,
)
from .base import ROOT_FOLDER_ID, ContentStore
from .errors import (
    AlreadyExistsError,
    FolderNotEmptyError,
    InvalidArgumentError,
    NotFoundError,
)
from .paths import ROOT_PATH, is_under, join_path, normalize_path, split_path, validate_name

logger = logging.getLogger(__name__)


def file_extension(name: str) -> str:
    """Lower-cased text after the last dot, or ``""`` when there is none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


class InMemoryStore(ContentStore):
    """Reference store: the semantic oracle for the remote implementation."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.folders: dict[str, FolderRecord] = {
            ROOT_FOLDER_ID: FolderRecord(
                id=ROOT_FOLDER_ID, parent_id=None, name="", path=ROOT_PATH
            )
        }
        self.files: dict[str, FileRecord] = {}
        self.collaborations: list[Collaboration] = []
        self._folder_ids = itertools.count(1)
        self._file_ids = itertools.count(1)

    # ============ INTERNAL LOOKUPS (caller holds the lock) ============

    def _child_folders(self, parent_id: str) -> list[FolderRecord]:
        return [f for f in self.folders.values() if f.parent_id == parent_id]

    def _child_files(self, parent_id: str) -> list[FileRecord]:
        return [f for f in self.files.values() if f.parent_id == parent_id]

    def _find_child_folder(self, parent_id: str, name: str) -> FolderRecord | None:
        return next(
            (f for f in self.folders.values() if f.parent_id == parent_id and f.name == name),
            None,
        )

    def _find_child_file(self, parent_id: str, name: str) -> FileRecord | None:
        return next(
            (f for f in self.files.values() if f.parent_id == parent_id and f.name == name),
            None,
        )

    def _require_folder(self, folder_id: str) -> FolderRecord:
        folder = self.folders.get(folder_id)
        if folder is None:
            raise NotFoundError(f"Folder not found: {folder_id}")
        return folder

    def _require_file(self, file_id: str) -> FileRecord:
        file = self.files.get(file_id)
        if file is None:
            raise NotFoundError(f"File not found: {file_id}")
        return file

    def _name_taken(self, parent_id: str, name: str, exclude_id: str | None = None) -> bool:
        folder = self._find_child_folder(parent_id, name)
        if folder is not None and folder.id != exclude_id:
            return True
        file = self._find_child_file(parent_id, name)
        return file is not None and file.id != exclude_id

    def _walk(self, segments: list[str]) -> str | None:
        current = ROOT_FOLDER_ID
        for segment in segments:
            child = self._find_child_folder(current, segment)
            if child is None:
                return None
            current = child.id
        return current

    def _file_path(self, file: FileRecord) -> str:
        parent = self.folders.get(file.parent_id)
        return join_path(parent.path if parent else ROOT_PATH, file.name)

    def _repath(self, folder_id: str, parent_path: str) -> None:
        """Re-derive paths below ``folder_id`` and touch every descendant."""
        folder = self.folders[folder_id]
        folder.path = join_path(parent_path, folder.name)
        folder.modified_at = utcnow()
        for child in self._child_folders(folder_id):
            self._repath(child.id, folder.path)
        for file in self._child_files(folder_id):
            file.modified_at = utcnow()

    def require_item(self, item_type: ItemType | str, item_id: str) -> FolderRecord | FileRecord:
        """Look up a folder or file by type and ID (caller holds the lock)."""
        if ItemType(item_type) == ItemType.FOLDER:
            return self._require_folder(item_id)
        return self._require_file(item_id)

    # ============ PATH RESOLUTION ============

    async def resolve_path(self, path: str | None) -> str | None:
        async with self.lock:
            return self._walk(split_path(path))

    async def ensure_folder_path(self, path: str, description: str | None = None) -> str:
        async with self.lock:
            current = self.folders[ROOT_FOLDER_ID]
            for segment in split_path(path):
                existing = self._find_child_folder(current.id, segment)
                if existing is not None:
                    current = existing
                    continue
                if self._find_child_file(current.id, segment) is not None:
                    raise AlreadyExistsError(
                        f"A file named '{segment}' already exists in {current.path}"
                    )
                folder_id = f"fld_{next(self._folder_ids)}"
                created = FolderRecord(
                    id=folder_id,
                    parent_id=current.id,
                    name=segment,
                    path=join_path(current.path, segment),
                    description=description,
                )
                self.folders[folder_id] = created
                logger.debug(f"Created folder {created.path} ({folder_id})")
                current = created
            return current.id

    async def get_folder(self, folder_id: str) -> FolderRecord:
        async with self.lock:
            return self._require_folder(folder_id).model_copy()

    async def list_children(self, folder_id: str) -> list[FolderEntry]:
        async with self.lock:
            self._require_folder(folder_id)
            entries = [
                FolderEntry(id=f.id, name=f.name, type=ItemType.FOLDER, modified_at=f.modified_at)
                for f in self._child_folders(folder_id)
            ]
            entries.extend(
                FolderEntry(
                    id=f.id,
                    name=f.name,
                    type=ItemType.FILE,
                    size=f.size,
                    modified_at=f.modified_at,
                )
                for f in self._child_files(folder_id)
            )
            return entries

    # ============ FOLDER MUTATIONS ============

    async def move_folder(
        self, folder_id: str, new_parent_id: str, new_name: str | None = None
    ) -> None:
        async with self.lock:
            folder = self._require_folder(folder_id)
            parent = self._require_folder(new_parent_id)
            if folder_id == ROOT_FOLDER_ID:
                raise InvalidArgumentError("The root folder cannot be moved")
            final_name = folder.name if new_name is None else validate_name(new_name)
            if folder.parent_id == new_parent_id and folder.name == final_name:
                return
            if new_parent_id == folder_id or is_under(parent.path, folder.path):
                raise InvalidArgumentError("Cannot move a folder into its own subtree")
            # Checked against the final name before anything changes
            if self._name_taken(new_parent_id, final_name, exclude_id=folder_id):
                raise AlreadyExistsError(
                    f"An item named '{final_name}' already exists in {parent.path}"
                )
            folder.parent_id = new_parent_id
            folder.name = final_name
            self._repath(folder_id, parent.path)
            logger.debug(f"Moved folder {folder_id} to {folder.path}")

    async def rename_folder(self, folder_id: str, new_name: str) -> None:
        async with self.lock:
            folder = self._require_folder(folder_id)
            validate_name(new_name)
            if folder_id == ROOT_FOLDER_ID:
                raise InvalidArgumentError("The root folder cannot be renamed")
            if folder.name == new_name:
                return
            if self._name_taken(folder.parent_id, new_name, exclude_id=folder_id):
                raise AlreadyExistsError(f"An item named '{new_name}' already exists")
            parent = self.folders[folder.parent_id]
            folder.name = new_name
            self._repath(folder_id, parent.path)
            logger.debug(f"Renamed folder {folder_id} to {folder.path}")

    async def delete_folder(self, folder_id: str, recursive: bool = False) -> None:
        async with self.lock:
            self._require_folder(folder_id)
            if folder_id == ROOT_FOLDER_ID:
                raise InvalidArgumentError("The root folder cannot be deleted")
            has_children = bool(self._child_folders(folder_id) or self._child_files(folder_id))
            if has_children and not recursive:
                raise FolderNotEmptyError("Folder not empty")
            self._delete_subtree(folder_id)

    def _delete_subtree(self, folder_id: str) -> None:
        for child in self._child_folders(folder_id):
            self._delete_subtree(child.id)
        removed = {folder_id}
        for file in self._child_files(folder_id):
            del self.files[file.id]
            removed.add(file.id)
        folder = self.folders.pop(folder_id)
        self.collaborations = [c for c in self.collaborations if c.item_id not in removed]
        logger.debug(f"Deleted folder {folder.path} ({folder_id})")

    # ============ FILES ============

    async def upload_file(self, parent_id: str, file_name: str, content: bytes) -> FileHandle:
        async with self.lock:
            parent = self._require_folder(parent_id)
            validate_name(file_name)
            existing = self._find_child_file(parent_id, file_name)
            if existing is not None:
                existing.replace_content(content)
                logger.debug(f"Overwrote file {existing.id} ({existing.size} bytes)")
                return FileHandle(id=existing.id, size=existing.size)
            if self._find_child_folder(parent_id, file_name) is not None:
                raise AlreadyExistsError(
                    f"A folder named '{file_name}' already exists in {parent.path}"
                )
            file_id = f"fil_{next(self._file_ids)}"
            record = FileRecord(
                id=file_id, parent_id=parent_id, name=file_name, content=content, size=len(content)
            )
            self.files[file_id] = record
            logger.debug(f"Created file {join_path(parent.path, file_name)} ({file_id})")
            return FileHandle(id=file_id, size=record.size)

    async def check_file_exists(self, parent_id: str, file_name: str) -> FileHandle | None:
        async with self.lock:
            file = self._find_child_file(parent_id, file_name)
            return FileHandle(id=file.id, size=file.size) if file else None

    async def get_file_by_path(self, path: str) -> FileContent | None:
        segments = split_path(path)
        if not segments:
            return None
        async with self.lock:
            parent_id = self._walk(segments[:-1])
            if parent_id is None:
                return None
            file = self._find_child_file(parent_id, segments[-1])
            if file is None:
                return None
            return FileContent(id=file.id, name=file.name, size=file.size, content=file.content)

    async def get_file_content(self, file_id: str) -> bytes:
        async with self.lock:
            return self._require_file(file_id).content

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
        # Nothing is ever trashed in memory, so include_trashed has no effect.
        needle = query.casefold() if query else None
        item_type = SearchItemType(type or SearchItemType.ALL)
        allowed_exts = {e.lower().lstrip(".") for e in extensions} if extensions else None
        ancestors = [normalize_path(p) for p in ancestor_paths] if ancestor_paths else None
        matches: list[SearchEntry] = []

        async with self.lock:
            # Extension and ancestor filters narrow files only
            if item_type in (SearchItemType.ALL, SearchItemType.FOLDER):
                for folder in self.folders.values():
                    if folder.id == ROOT_FOLDER_ID:
                        continue
                    if needle is None or needle in folder.name.casefold():
                        matches.append(
                            SearchEntry(
                                id=folder.id,
                                type=ItemType.FOLDER,
                                name=folder.name,
                                path=folder.path,
                                parent_id=folder.parent_id,
                                modified_at=folder.modified_at,
                            )
                        )

            if item_type in (SearchItemType.ALL, SearchItemType.FILE):
                for file in self.files.values():
                    if allowed_exts is not None and file_extension(file.name) not in allowed_exts:
                        continue
                    path = self._file_path(file)
                    if ancestors is not None and not any(is_under(path, a) for a in ancestors):
                        continue
                    if needle is not None and needle not in file.name.casefold():
                        if not include_content:
                            continue
                        text = file.content.decode("utf-8", errors="ignore").casefold()
                        if needle not in text:
                            continue
                    matches.append(
                        SearchEntry(
                            id=file.id,
                            type=ItemType.FILE,
                            name=file.name,
                            path=path,
                            parent_id=file.parent_id,
                            size=file.size,
                            modified_at=file.modified_at,
                        )
                    )

        if SearchSortBy(sort_by or SearchSortBy.RELEVANCE) == SearchSortBy.MODIFIED_AT:
            matches.sort(
                key=lambda e: e.modified_at,
                reverse=SortDirection(direction or SortDirection.DESC) == SortDirection.DESC,
            )

        return SearchResult(total_count=len(matches), entries=matches[: max(limit, 0)])
