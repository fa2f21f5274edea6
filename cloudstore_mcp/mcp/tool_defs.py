"""MCP Tool Definitions for the content store server.

This module contains all tool definitions returned by the tools/list method.
Each tool definition includes the schema for its input parameters.

Tool Categories:
    - Documents: save_documents, retrieve_documents, read_document
    - Organization: manage_folders, explore_storage
    - Discovery: search_content
    - Sharing: share_content, update_shared_link, remove_shared_link, update_collaborators
    - Analysis: analyze_document
"""

from ..engine.handlers import (
    HandlerFunc,
    handle_analyze_document,
    handle_explore_storage,
    handle_manage_folders,
    handle_read_document,
    handle_remove_shared_link,
    handle_retrieve_documents,
    handle_save_documents,
    handle_search_content,
    handle_share_content,
    handle_update_collaborators,
    handle_update_shared_link,
)
from ..models import (
    AnalysisType,
    CollaboratorRole,
    FolderAction,
    ItemType,
    SearchItemType,
    SearchSortBy,
    SharedLinkAccess,
    ShareMethod,
    SortDirection,
    ToolName,
    TreeSortBy,
)
from .registry import ToolRegistry, ToolSpec


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


ITEM_TYPE_SCHEMA = {"type": "string", "enum": _values(ItemType)}

# Single-item sharing tools address the item by ID or path, always with its type
ITEM_ADDRESS_ANY_OF = [
    {"required": ["itemId", "itemType"]},
    {"required": ["path", "itemType"]},
]


TOOL_DEFINITIONS: list[dict] = [
    # ============ Document Tools ============
    {
        "name": ToolName.SAVE_DOCUMENTS,
        "description": "Save multiple documents to storage with automatic folder creation.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "documents": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "path": {
                                "type": "string",
                                "description": "Destination path including the file name",
                            },
                            "content": {
                                "type": "string",
                                "description": "UTF-8 text, or data after a 'base64,' marker",
                            },
                        },
                        "required": ["path", "content"],
                    },
                },
                "options": {
                    "type": "object",
                    "properties": {
                        "overwrite": {"type": "boolean", "default": False},
                        "createFolders": {"type": "boolean", "default": True},
                    },
                },
            },
            "required": ["documents"],
        },
    },
    {
        "name": ToolName.RETRIEVE_DOCUMENTS,
        "description": "Retrieve the content of several documents by file ID or path.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "documents": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "fileId": {"type": "string"},
                            "path": {"type": "string"},
                        },
                        "oneOf": [{"required": ["fileId"]}, {"required": ["path"]}],
                    },
                },
                "options": {
                    "type": "object",
                    "properties": {"asText": {"type": "boolean", "default": True}},
                },
            },
            "required": ["documents"],
        },
    },
    {
        "name": ToolName.READ_DOCUMENT,
        "description": "Read document content without saving it locally.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "fileId": {"type": "string"},
                "path": {"type": "string"},
                "options": {
                    "type": "object",
                    "properties": {
                        "asText": {
                            "type": "boolean",
                            "default": True,
                            "description": "Decode as UTF-8; false returns base64",
                        },
                    },
                },
            },
            "oneOf": [{"required": ["fileId"]}, {"required": ["path"]}],
        },
    },
    # ============ Organization Tools ============
    {
        "name": ToolName.MANAGE_FOLDERS,
        "description": "Create, move, rename, or delete folders by path or ID.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "action": {"type": "string", "enum": _values(FolderAction)},
                "folders": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "path": {"type": "string"},
                            "folderId": {"type": "string"},
                            "newPath": {
                                "type": "string",
                                "description": "Full destination path for move",
                            },
                            "newName": {"type": "string"},
                            "description": {"type": "string"},
                            "recursive": {
                                "type": "boolean",
                                "default": True,
                                "description": "Delete non-empty folders with their contents",
                            },
                        },
                    },
                },
            },
            "required": ["action", "folders"],
        },
    },
    {
        "name": ToolName.EXPLORE_STORAGE,
        "description": "Return a tree structure of folders and files starting at a path.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "default": "/"},
                "options": {
                    "type": "object",
                    "properties": {
                        "depth": {"type": "integer", "default": 2, "minimum": 0, "maximum": 20},
                        "includeFiles": {"type": "boolean", "default": True},
                        "includeSizes": {"type": "boolean", "default": True},
                        "includeModified": {"type": "boolean", "default": True},
                        "pattern": {
                            "type": "string",
                            "description": "Glob on names: * any run, ? one character",
                        },
                        "sortBy": {
                            "type": "string",
                            "enum": _values(TreeSortBy),
                            "default": TreeSortBy.NAME,
                        },
                    },
                },
            },
        },
    },
    # ============ Discovery Tools ============
    {
        "name": ToolName.SEARCH_CONTENT,
        "description": "Search for files and folders with optional filters.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "filters": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": _values(SearchItemType),
                            "default": SearchItemType.ALL,
                        },
                        "extensions": {"type": "array", "items": {"type": "string"}},
                        "folders": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Ancestor folder paths",
                        },
                    },
                },
                "options": {
                    "type": "object",
                    "properties": {
                        "limit": {"type": "integer", "default": 20, "minimum": 1, "maximum": 200},
                        "includeContent": {"type": "boolean", "default": True},
                        "includeTrashed": {"type": "boolean", "default": False},
                        "sortBy": {
                            "type": "string",
                            "enum": _values(SearchSortBy),
                            "default": SearchSortBy.RELEVANCE,
                        },
                        "direction": {
                            "type": "string",
                            "enum": _values(SortDirection),
                            "default": SortDirection.DESC,
                        },
                    },
                },
            },
            "required": ["query"],
        },
    },
    # ============ Sharing Tools ============
    {
        "name": ToolName.SHARE_CONTENT,
        "description": "Create shared links and/or add collaborators to files or folders.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "items": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "itemId": {"type": "string"},
                            "path": {"type": "string"},
                            "itemType": ITEM_TYPE_SCHEMA,
                        },
                        "required": ["itemType"],
                        "anyOf": [{"required": ["itemId"]}, {"required": ["path"]}],
                    },
                },
                "shareMethod": {"type": "string", "enum": _values(ShareMethod)},
                "linkSettings": {
                    "type": "object",
                    "properties": {
                        "access": {
                            "type": "string",
                            "enum": _values(SharedLinkAccess),
                            "default": SharedLinkAccess.COMPANY,
                        },
                        "password": {"type": "string"},
                        "expiresIn": {
                            "type": "number",
                            "exclusiveMinimum": 0,
                            "description": "Days until the link expires",
                        },
                        "canDownload": {"type": "boolean", "default": True},
                    },
                },
                "collaborators": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "email": {"type": "string", "format": "email"},
                            "role": {
                                "type": "string",
                                "enum": _values(CollaboratorRole),
                                "default": CollaboratorRole.VIEWER,
                            },
                            "notify": {"type": "boolean", "default": True},
                        },
                        "required": ["email"],
                    },
                },
            },
            "required": ["items", "shareMethod"],
        },
    },
    {
        "name": ToolName.UPDATE_SHARED_LINK,
        "description": "Update shared link settings for a file or folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "itemType": ITEM_TYPE_SCHEMA,
                "itemId": {"type": "string"},
                "path": {"type": "string"},
                "access": {"type": "string", "enum": _values(SharedLinkAccess)},
                "password": {"type": "string"},
                "canDownload": {"type": "boolean"},
                "unsharedAt": {"type": "string", "description": "ISO 8601 expiry timestamp"},
            },
            "anyOf": ITEM_ADDRESS_ANY_OF,
        },
    },
    {
        "name": ToolName.REMOVE_SHARED_LINK,
        "description": "Remove the shared link from a file or folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "itemType": ITEM_TYPE_SCHEMA,
                "itemId": {"type": "string"},
                "path": {"type": "string"},
            },
            "anyOf": ITEM_ADDRESS_ANY_OF,
        },
    },
    {
        "name": ToolName.UPDATE_COLLABORATORS,
        "description": "Update collaborator roles or remove collaborators on a file or folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "itemType": ITEM_TYPE_SCHEMA,
                "itemId": {"type": "string"},
                "path": {"type": "string"},
                "updates": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "email": {"type": "string", "format": "email"},
                            "role": {"type": "string", "enum": _values(CollaboratorRole)},
                            "remove": {"type": "boolean"},
                        },
                        "required": ["email"],
                    },
                },
            },
            "required": ["updates"],
            "anyOf": ITEM_ADDRESS_ANY_OF,
        },
    },
    # ============ Analysis Tools ============
    {
        "name": ToolName.ANALYZE_DOCUMENT,
        "description": "Analyze documents with AI: summarize, Q&A, extract, classify, translate.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "fileId": {"type": "string"},
                "paths": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "fileIds": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "analysisType": {"type": "string", "enum": _values(AnalysisType)},
                "question": {"type": "string", "description": "Question for qa mode"},
                "options": {
                    "type": "object",
                    "properties": {
                        "includeCitations": {"type": "boolean", "default": False},
                        "targetLanguage": {"type": "string", "description": "For translate"},
                        "dialogueHistory": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "prompt": {"type": "string"},
                                    "answer": {"type": "string"},
                                },
                            },
                        },
                        "fields": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "key": {"type": "string"},
                                    "description": {"type": "string"},
                                },
                                "required": ["key"],
                            },
                        },
                        "metadataTemplate": {
                            "type": "object",
                            "properties": {
                                "templateKey": {"type": "string"},
                                "scope": {"type": "string"},
                            },
                        },
                        "summaryFocus": {"type": "string"},
                    },
                },
            },
            "oneOf": [
                {"required": ["analysisType", "fileId"]},
                {"required": ["analysisType", "path"]},
                {"required": ["analysisType", "fileIds"]},
                {"required": ["analysisType", "paths"]},
            ],
        },
    },
]


# Mapping of tool name -> handler, closed over ToolName
TOOL_HANDLERS: dict[ToolName, HandlerFunc] = {
    ToolName.SAVE_DOCUMENTS: handle_save_documents,
    ToolName.RETRIEVE_DOCUMENTS: handle_retrieve_documents,
    ToolName.READ_DOCUMENT: handle_read_document,
    ToolName.MANAGE_FOLDERS: handle_manage_folders,
    ToolName.EXPLORE_STORAGE: handle_explore_storage,
    ToolName.SEARCH_CONTENT: handle_search_content,
    ToolName.SHARE_CONTENT: handle_share_content,
    ToolName.UPDATE_SHARED_LINK: handle_update_shared_link,
    ToolName.REMOVE_SHARED_LINK: handle_remove_shared_link,
    ToolName.UPDATE_COLLABORATORS: handle_update_collaborators,
    ToolName.ANALYZE_DOCUMENT: handle_analyze_document,
}


def build_default_registry() -> ToolRegistry:
    """Registry holding every tool in ``TOOL_DEFINITIONS``."""
    return ToolRegistry(
        [
            ToolSpec(
                name=str(d["name"]),
                description=d["description"],
                input_schema=d["inputSchema"],
                handler=TOOL_HANDLERS[ToolName(d["name"])],
            )
            for d in TOOL_DEFINITIONS
        ]
    )
