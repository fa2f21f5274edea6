"""Static resource and prompt metadata served by resources/list and prompts/*.

Nothing here touches the store; prompts render a single user message that
points the client at the matching tool.
"""

from typing import Any

from ..models import ToolName

RESOURCES: list[dict[str, str]] = [
    {
        "uri": "box://file/{fileId}",
        "name": "File",
        "description": "Access to a specific file by ID",
        "mimeType": "application/json",
    },
    {
        "uri": "box://folder/{folderId}",
        "name": "Folder",
        "description": "Access to a specific folder by ID",
        "mimeType": "application/json",
    },
    {
        "uri": "box://search?q={query}",
        "name": "Search",
        "description": "Search content with query parameters",
        "mimeType": "application/json",
    },
    {
        "uri": "box://user/storage",
        "name": "Storage Info",
        "description": "Current user's storage quota and usage",
        "mimeType": "application/json",
    },
    {
        "uri": "box://user/recent",
        "name": "Recent Files",
        "description": "Recently accessed files",
        "mimeType": "application/json",
    },
    {
        "uri": "box://folder/root/tree",
        "name": "Root Folder Tree",
        "description": "Complete folder structure from root",
        "mimeType": "application/json",
    },
]


def _arg(name: str, description: str, required: bool = False) -> dict[str, Any]:
    return {"name": name, "description": description, "required": required}


PROMPTS: list[dict[str, Any]] = [
    {
        "name": "share_file",
        "description": "Create a shared link for a file with customizable permissions",
        "arguments": [
            _arg("fileId", "File ID to share", required=True),
            _arg("access", "Access level (open, company, collaborators)"),
            _arg("password", "Optional password protection"),
            _arg("expiresAt", "Optional expiration date (YYYY-MM-DD)"),
        ],
    },
    {
        "name": "analyze_document",
        "description": "Analyze a document with AI using specific questions or tasks",
        "arguments": [
            _arg("fileId", "File ID to analyze", required=True),
            _arg("analysisType", "Type of analysis (summarize, extract, qa)", required=True),
            _arg("prompt", "Specific question or analysis request"),
            _arg("focus", "Specific aspects to focus on"),
        ],
    },
    {
        "name": "organize_folder",
        "description": "Organize files in a folder by creating subfolders and moving files",
        "arguments": [
            _arg("folderId", "Folder ID to organize", required=True),
            _arg("strategy", "Organization strategy (by_date, by_type, by_name)", required=True),
            _arg("createSubfolders", "Whether to create subfolders"),
        ],
    },
    {
        "name": "bulk_upload",
        "description": "Upload multiple files with folder organization",
        "arguments": [
            _arg("targetFolder", "Target folder path or ID", required=True),
            _arg("createFolders", "Auto-create folder structure"),
            _arg("classification", "Security classification for files"),
        ],
    },
    {
        "name": "collaboration_setup",
        "description": "Set up collaboration on a file or folder with specific users",
        "arguments": [
            _arg("itemId", "File or folder ID", required=True),
            _arg("itemType", "Item type (file or folder)", required=True),
            _arg("collaborators", "Comma-separated list of email addresses", required=True),
            _arg("role", "Collaboration role (viewer, editor, co-owner)", required=True),
        ],
    },
]


class UnknownPromptError(KeyError):
    """No prompt template is registered under the requested name."""


def _message(description: str, text: str) -> dict[str, Any]:
    return {
        "description": description,
        "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
    }


def _share_file(args: dict[str, Any]) -> dict[str, Any]:
    text = f"Create a shared link for file {args.get('fileId')} with the following settings:\n"
    text += f"- Access level: {args.get('access') or 'company'}\n"
    if args.get("password"):
        text += f"- Password protected: {args['password']}\n"
    if args.get("expiresAt"):
        text += f"- Expires on: {args['expiresAt']}\n"
    text += (
        f"\nUse the {ToolName.UPDATE_SHARED_LINK} tool to create or update the shared link "
        "with these settings."
    )
    return _message("Prompt to create a shared link for a file", text)


def _analyze_document(args: dict[str, Any]) -> dict[str, Any]:
    analysis = args.get("analysisType") or "summarize"
    text = f"Use AI to {analysis} the document with file ID {args.get('fileId')}.\n"
    if args.get("prompt"):
        text += f"Specific request: {args['prompt']}\n"
    if args.get("focus"):
        text += f"Focus on: {args['focus']}\n"
    text += (
        f"\nUse the {ToolName.ANALYZE_DOCUMENT} tool with the appropriate analysis type "
        "and parameters."
    )
    return _message("Prompt to analyze a document using AI", text)


def _organize_folder(args: dict[str, Any]) -> dict[str, Any]:
    strategy = args.get("strategy") or "by_type"
    folder_id = args.get("folderId")
    text = f'Organize the files in folder {folder_id} using the "{strategy}" strategy.\n'
    if args.get("createSubfolders", True):
        text += "Create subfolders as needed for organization.\n"
    text += (
        f"\nFirst use {ToolName.EXPLORE_STORAGE} to see the current folder structure, "
        f"then use {ToolName.MANAGE_FOLDERS} to reorganize as needed."
    )
    return _message("Prompt to organize files in a folder", text)


def _bulk_upload(args: dict[str, Any]) -> dict[str, Any]:
    text = f"Upload multiple files to folder: {args.get('targetFolder')}\n"
    if args.get("createFolders", True):
        text += "Automatically create folder structure as needed.\n"
    if args.get("classification"):
        text += f"Apply security classification: {args['classification']}\n"
    text += (
        f"\nUse the {ToolName.SAVE_DOCUMENTS} tool with appropriate folder creation "
        "and metadata settings."
    )
    return _message("Prompt for bulk file upload", text)


def _collaboration_setup(args: dict[str, Any]) -> dict[str, Any]:
    text = f"Set up collaboration on {args.get('itemType') or 'file'} {args.get('itemId')}:\n"
    text += f"- Add collaborators: {args.get('collaborators')}\n"
    text += f"- Role: {args.get('role') or 'editor'}\n"
    text += (
        f"\nUse the {ToolName.SHARE_CONTENT} tool with shareMethod 'collaborator' to add "
        f"these collaborators, and {ToolName.UPDATE_COLLABORATORS} to adjust roles later."
    )
    return _message("Prompt to set up collaboration on an item", text)


PROMPT_RENDERERS = {
    "share_file": _share_file,
    "analyze_document": _analyze_document,
    "organize_folder": _organize_folder,
    "bulk_upload": _bulk_upload,
    "collaboration_setup": _collaboration_setup,
}


def get_prompt(name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """Render the named prompt template.

    Raises:
        UnknownPromptError: If ``name`` is not a known prompt
    """
    renderer = PROMPT_RENDERERS.get(name)
    if renderer is None:
        raise UnknownPromptError(name)
    return renderer(arguments or {})
