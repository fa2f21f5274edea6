"""Pydantic models for the content store server.

Import from submodules directly for narrower imports:

    from cloudstore_mcp.models.enums import ToolName, ItemType
    from cloudstore_mcp.models.store import FolderRecord
"""

# ============ ENUMS ============
from .enums import (
    AnalysisType,
    CollaboratorRole,
    FolderAction,
    ItemType,
    SearchItemType,
    SearchSortBy,
    SharedLinkAccess,
    ShareMethod,
    SortDirection,
    StoreBackend,
    ToolName,
    TransportKind,
    TreeSortBy,
)

# ============ HTTP MODELS ============
from .responses import HealthResponse

# ============ RESULT MODELS ============
from .results import (
    AnalysisResult,
    FileSummary,
    FolderActionResult,
    RetrieveDocumentsResult,
    RetrieveItemResult,
    SaveDocumentsResult,
    SaveItemResult,
    ShareItemResult,
    ToolResult,
)

# ============ STORE MODELS ============
from .store import (
    AIAnswer,
    AIExtraction,
    Collaboration,
    FileContent,
    FileHandle,
    FileRecord,
    FolderEntry,
    FolderRecord,
    SearchEntry,
    SearchResult,
    SharedLink,
    TreeNode,
)

__all__ = [
    # Enums
    "AnalysisType",
    "CollaboratorRole",
    "FolderAction",
    "ItemType",
    "SearchItemType",
    "SearchSortBy",
    "SharedLinkAccess",
    "ShareMethod",
    "SortDirection",
    "StoreBackend",
    "ToolName",
    "TransportKind",
    "TreeSortBy",
    # Store models
    "AIAnswer",
    "AIExtraction",
    "Collaboration",
    "FileContent",
    "FileHandle",
    "FileRecord",
    "FolderEntry",
    "FolderRecord",
    "SearchEntry",
    "SearchResult",
    "SharedLink",
    "TreeNode",
    # HTTP models
    "HealthResponse",
    # Result models
    "AnalysisResult",
    "FileSummary",
    "FolderActionResult",
    "RetrieveDocumentsResult",
    "RetrieveItemResult",
    "SaveDocumentsResult",
    "SaveItemResult",
    "ShareItemResult",
    "ToolResult",
]
