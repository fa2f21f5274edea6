"""Records held by the hierarchical store and the sharing ledger."""

from datetime import UTC, datetime

from pydantic import Field

from .base import CamelModel
from .enums import CollaboratorRole, ItemType


def utcnow() -> datetime:
    return datetime.now(UTC)


# ============ SHARING ============


class SharedLink(CamelModel):
    """Link-sharing descriptor embedded in a folder or file.

    Presence on an item is the only signal that the item is link-shared.
    """

    url: str = Field(..., description="Public URL of the shared link")
    access: str | None = Field(default=None, description="open, company or collaborators")
    unshared_at: datetime | None = Field(default=None, description="When the link expires")
    can_download: bool | None = Field(default=None, description="Whether downloads are allowed")
    is_password_enabled: bool = Field(default=False, description="Whether a password is set")


class Collaboration(CamelModel):
    """A role grant binding an email address to one item."""

    id: str = Field(..., description="Collaboration ID")
    item_type: ItemType = Field(..., description="Type of the shared item")
    item_id: str = Field(..., description="ID of the shared item")
    email: str = Field(..., description="Collaborator login")
    role: str = Field(default=CollaboratorRole.VIEWER, description="Granted role")


# ============ HIERARCHY ============


class FolderRecord(CamelModel):
    """A folder node. The root has ``parent_id=None`` and ``path='/'``."""

    id: str
    parent_id: str | None
    name: str
    path: str
    description: str | None = None
    modified_at: datetime = Field(default_factory=utcnow)
    shared_link: SharedLink | None = None


class FileRecord(CamelModel):
    """A file node. ``size`` always equals ``len(content)``."""

    id: str
    parent_id: str
    name: str
    content: bytes = Field(default=b"", exclude=True, repr=False)
    size: int = Field(default=0, ge=0)
    modified_at: datetime = Field(default_factory=utcnow)
    shared_link: SharedLink | None = None

    def replace_content(self, content: bytes) -> None:
        self.content = content
        self.size = len(content)
        self.modified_at = utcnow()


class FolderEntry(CamelModel):
    """One child of a folder as returned by ``list_children``."""

    id: str
    name: str
    type: ItemType
    size: int | None = None
    modified_at: datetime | None = None


class FileHandle(CamelModel):
    """Identity and size of an uploaded or existing file."""

    id: str
    size: int


class FileContent(CamelModel):
    """A file resolved by path together with its bytes."""

    id: str
    name: str
    size: int
    content: bytes = Field(default=b"", exclude=True, repr=False)


# ============ ENUMERATION ============


class TreeNode(CamelModel):
    """A node of the tree built by ``build_tree``."""

    id: str | None = None
    name: str
    path: str
    type: ItemType
    size: int | None = None
    modified_at: datetime | None = None
    children: list["TreeNode"] | None = None


class SearchEntry(CamelModel):
    """One search hit."""

    id: str
    type: ItemType
    name: str
    path: str
    parent_id: str | None = None
    size: int | None = None
    modified_at: datetime | None = None


class SearchResult(CamelModel):
    """Search page plus the full match count before truncation."""

    total_count: int = Field(default=0, ge=0)
    entries: list[SearchEntry] = Field(default_factory=list)


# ============ ANALYSIS ============


class AIAnswer(CamelModel):
    """Answer returned by the document analysis capability."""

    answer: str
    citations: list[dict] | None = None


class AIExtraction(CamelModel):
    """Structured field extraction returned by the analysis capability."""

    fields: dict = Field(default_factory=dict)
