"""Enumeration types for the content store server."""

from enum import StrEnum


class ToolName(StrEnum):
    """Tools exposed through tools/list and tools/call."""

    SAVE_DOCUMENTS = "save_documents"
    RETRIEVE_DOCUMENTS = "retrieve_documents"
    READ_DOCUMENT = "read_document"
    MANAGE_FOLDERS = "manage_folders"
    EXPLORE_STORAGE = "explore_storage"
    SEARCH_CONTENT = "search_content"
    SHARE_CONTENT = "share_content"
    UPDATE_SHARED_LINK = "update_shared_link"
    REMOVE_SHARED_LINK = "remove_shared_link"
    UPDATE_COLLABORATORS = "update_collaborators"
    ANALYZE_DOCUMENT = "analyze_document"


class ItemType(StrEnum):
    """The two kinds of addressable content."""

    FILE = "file"
    FOLDER = "folder"


class SearchItemType(StrEnum):
    """Item type filter for search."""

    ALL = "all"
    FILE = "file"
    FOLDER = "folder"


class SharedLinkAccess(StrEnum):
    """Who can open a shared link."""

    OPEN = "open"
    COMPANY = "company"
    COLLABORATORS = "collaborators"


class CollaboratorRole(StrEnum):
    """Roles a collaborator can hold on an item."""

    VIEWER = "viewer"
    EDITOR = "editor"
    CO_OWNER = "co-owner"
    PREVIEWER = "previewer"
    UPLOADER = "uploader"
    PREVIEWER_UPLOADER = "previewer uploader"
    VIEWER_UPLOADER = "viewer uploader"


class FolderAction(StrEnum):
    """Actions accepted by manage_folders."""

    CREATE = "create"
    MOVE = "move"
    RENAME = "rename"
    DELETE = "delete"


class ShareMethod(StrEnum):
    """How share_content grants access."""

    LINK = "link"
    COLLABORATOR = "collaborator"
    BOTH = "both"


class AnalysisType(StrEnum):
    """Document analysis modes."""

    SUMMARIZE = "summarize"
    QA = "qa"
    EXTRACT = "extract"
    EXTRACT_STRUCTURED = "extract_structured"
    CLASSIFY = "classify"
    TRANSLATE = "translate"


class TreeSortBy(StrEnum):
    """Sort key for explore_storage children."""

    NAME = "name"
    DATE = "date"
    SIZE = "size"
    TYPE = "type"


class SearchSortBy(StrEnum):
    """Sort key for search results."""

    RELEVANCE = "relevance"
    MODIFIED_AT = "modified_at"


class SortDirection(StrEnum):
    """Sort direction for search results."""

    DESC = "DESC"
    ASC = "ASC"


class StoreBackend(StrEnum):
    """Which store implementation backs the server."""

    MEMORY = "memory"
    REMOTE = "remote"


class TransportKind(StrEnum):
    """How JSON-RPC requests reach the dispatcher."""

    STDIO = "stdio"
    HTTP = "http"
