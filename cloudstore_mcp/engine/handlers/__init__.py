"""Tool handlers for the content store server.

This package contains the tool handlers organized by domain:
- documents: save_documents, retrieve_documents, read_document
- folders: manage_folders, explore_storage
- search: search_content
- sharing: share_content, update_shared_link, remove_shared_link, update_collaborators
- analyze: analyze_document

Each handler is a standalone async function that takes:
- params: dict[str, Any] - Schema-validated tool arguments from tools/call
- ctx: HandlerContext - Shared store, ledger, analyzer and settings

And returns:
- ToolResult with data, optional structured_content and is_error
"""

from .analyze import handle_analyze_document
from .base import HandlerContext, HandlerFunc, resolve_item_id, run_batch
from .documents import handle_read_document, handle_retrieve_documents, handle_save_documents
from .folders import handle_explore_storage, handle_manage_folders
from .search import handle_search_content
from .sharing import (
    handle_remove_shared_link,
    handle_share_content,
    handle_update_collaborators,
    handle_update_shared_link,
)

__all__ = [
    # Base
    "HandlerContext",
    "HandlerFunc",
    "resolve_item_id",
    "run_batch",
    # Document handlers
    "handle_save_documents",
    "handle_retrieve_documents",
    "handle_read_document",
    # Folder handlers
    "handle_manage_folders",
    "handle_explore_storage",
    # Search handlers
    "handle_search_content",
    # Sharing handlers
    "handle_share_content",
    "handle_update_shared_link",
    "handle_remove_shared_link",
    "handle_update_collaborators",
    # Analysis handlers
    "handle_analyze_document",
]
