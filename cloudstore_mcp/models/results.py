"""Tool result models.

Handlers return a ``ToolResult``; the dispatcher turns it into the
tools/call response envelope.
"""

from typing import Any

from pydantic import BaseModel, Field

from .base import CamelModel

# ============ ENVELOPE ============


class ToolResult(BaseModel):
    """Raw outcome of one tool invocation."""

    data: dict[str, Any] = Field(
        default_factory=dict, description="Top-level fields of the tool result"
    )
    structured_content: dict[str, Any] | None = Field(
        default=None, description="Structured payload, promoted into the envelope"
    )
    is_error: bool = Field(default=False, description="Validator or handler signalled failure")
    text: str | None = Field(
        default=None, description="Explicit text projection (defaults to serialized payload)"
    )

    @classmethod
    def failure(cls, error: str, **extra: Any) -> "ToolResult":
        """Call-level failure: ``{success: false, error}`` flagged as an error."""
        return cls(data={"success": False, "error": error, **extra}, is_error=True, text=error)


# ============ DOCUMENT RESULTS ============


class SaveItemResult(CamelModel):
    """Outcome of saving one document."""

    path: str
    success: bool
    file_id: str | None = None
    size: int | None = None
    error: str | None = None


class SaveDocumentsResult(CamelModel):
    """Result of save_documents."""

    success: bool
    saved: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    results: list[SaveItemResult] = Field(default_factory=list)


class RetrieveItemResult(CamelModel):
    """Outcome of retrieving one document."""

    success: bool
    file_id: str | None = None
    path: str | None = None
    name: str | None = None
    size: int | None = None
    content: str | None = None
    error: str | None = None


class RetrieveDocumentsResult(CamelModel):
    """Result of retrieve_documents."""

    success: bool
    retrieved: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    results: list[RetrieveItemResult] = Field(default_factory=list)


class FileSummary(CamelModel):
    """File identity returned by read_document."""

    id: str
    name: str | None = None
    size: int | None = None


# ============ FOLDER RESULTS ============


class FolderActionResult(CamelModel):
    """Outcome of one manage_folders entry."""

    action: str
    success: bool
    folder_id: str | None = None
    path: str | None = None
    new_name: str | None = None
    new_path: str | None = None
    error: str | None = None


# ============ SHARING RESULTS ============


class ShareItemResult(CamelModel):
    """Outcome of sharing one item."""

    success: bool
    item_type: str | None = None
    item_id: str | None = None
    path: str | None = None
    shared_link: str | None = None
    link_access: str | None = None
    unshared_at: str | None = None
    collaborators: list[dict[str, Any]] | None = None
    error: str | None = None


# ============ ANALYSIS RESULTS ============


class AnalysisResult(CamelModel):
    """Structured payload of analyze_document."""

    analysis_type: str
    answer: str | None = None
    citations: list[dict[str, Any]] | None = None
    fields: dict[str, Any] | None = None
    target_language: str | None = None
