"""Sharing and collaboration ledger.

Shared links are embedded in the item records; collaborations are a
separate relation keyed by (item type, item ID, email).

Collaborations are unique per (item, email): adding an email that already
collaborates on the item replaces its role, and updates touch that single
relation.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from ..models.enums import CollaboratorRole, ItemType
from ..models.store import Collaboration, SharedLink
from .memory import InMemoryStore

logger = logging.getLogger(__name__)


class SharingLedger(ABC):
    """Shared-link and collaborator state per item."""

    @abstractmethod
    async def create_shared_link(
        self,
        item_type: ItemType | str,
        item_id: str,
        access: str | None = None,
        password: str | None = None,
        can_download: bool | None = None,
        unshared_at: datetime | None = None,
    ) -> SharedLink:
        """Attach a shared link to an item, replacing any existing one."""

    async def update_shared_link(
        self,
        item_type: ItemType | str,
        item_id: str,
        access: str | None = None,
        password: str | None = None,
        can_download: bool | None = None,
        unshared_at: datetime | None = None,
    ) -> SharedLink:
        """Replace an item's shared link. Same semantics as create."""
        return await self.create_shared_link(
            item_type,
            item_id,
            access=access,
            password=password,
            can_download=can_download,
            unshared_at=unshared_at,
        )

    @abstractmethod
    async def remove_shared_link(self, item_type: ItemType | str, item_id: str) -> dict[str, Any]:
        """Clear an item's shared link. Removing a missing link is not an error."""

    @abstractmethod
    async def add_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        collaborators: list[dict[str, Any]],
        notify: bool = True,
    ) -> dict[str, Any]:
        """Grant roles to email addresses on an item. Returns ``{"added": [...]}``."""

    @abstractmethod
    async def update_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        updates: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Change or remove roles. Unmatched emails are skipped silently."""

    @abstractmethod
    async def list_collaborators(
        self, item_type: ItemType | str, item_id: str
    ) -> list[Collaboration]:
        """Collaborations currently attached to an item."""


class InMemoryLedger(SharingLedger):
    """Ledger over ``InMemoryStore`` records, sharing the store's lock."""

    def __init__(self, store: InMemoryStore, link_base_url: str = "https://box.mock/shared"):
        self.store = store
        self.link_base_url = link_base_url.rstrip("/")

    async def create_shared_link(
        self,
        item_type: ItemType | str,
        item_id: str,
        access: str | None = None,
        password: str | None = None,
        can_download: bool | None = None,
        unshared_at: datetime | None = None,
    ) -> SharedLink:
        item_type = ItemType(item_type)
        async with self.store.lock:
            record = self.store.require_item(item_type, item_id)
            link = SharedLink(
                url=f"{self.link_base_url}/{item_type.value}/{item_id}/{secrets.token_urlsafe(8)}",
                access=access or "company",
                unshared_at=unshared_at,
                can_download=True if can_download is None else can_download,
                is_password_enabled=bool(password),
            )
            record.shared_link = link
        logger.debug(f"Shared link set on {item_type.value} {item_id}")
        return link

    async def remove_shared_link(self, item_type: ItemType | str, item_id: str) -> dict[str, Any]:
        async with self.store.lock:
            record = self.store.require_item(item_type, item_id)
            record.shared_link = None
        return {"removed": True}

    async def add_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        collaborators: list[dict[str, Any]],
        notify: bool = True,
    ) -> dict[str, Any]:
        item_type = ItemType(item_type)
        added: list[dict[str, Any]] = []
        async with self.store.lock:
            self.store.require_item(item_type, item_id)
            for collaborator in collaborators:
                email = collaborator["email"]
                role = collaborator.get("role") or CollaboratorRole.VIEWER.value
                existing = self._find(item_type, item_id, email)
                if existing is not None:
                    existing.role = role
                    collab = existing
                else:
                    collab = Collaboration(
                        id=f"col_{secrets.token_hex(6)}",
                        item_type=item_type,
                        item_id=item_id,
                        email=email,
                        role=role,
                    )
                    self.store.collaborations.append(collab)
                added.append({"id": collab.id, "email": email, "role": role})
        if notify and added:
            logger.info(f"Would notify {len(added)} collaborator(s) on {item_type.value} {item_id}")
        return {"added": added}

    async def update_collaborators(
        self,
        item_type: ItemType | str,
        item_id: str,
        updates: list[dict[str, Any]],
    ) -> dict[str, Any]:
        item_type = ItemType(item_type)
        updated: list[dict[str, Any]] = []
        async with self.store.lock:
            self.store.require_item(item_type, item_id)
            for change in updates:
                email = change["email"]
                existing = self._find(item_type, item_id, email)
                if existing is None:
                    continue
                if change.get("remove"):
                    self.store.collaborations.remove(existing)
                    updated.append({"email": email, "removed": True})
                elif change.get("role"):
                    existing.role = change["role"]
                    updated.append({"email": email, "role": existing.role})
        return {"updated": updated}

    async def list_collaborators(
        self, item_type: ItemType | str, item_id: str
    ) -> list[Collaboration]:
        item_type = ItemType(item_type)
        async with self.store.lock:
            return [
                c.model_copy()
                for c in self.store.collaborations
                if c.item_type == item_type and c.item_id == item_id
            ]

    def _find(self, item_type: ItemType, item_id: str, email: str) -> Collaboration | None:
        email = email.casefold()
        return next(
            (
                c
                for c in self.store.collaborations
                if c.item_type == item_type
                and c.item_id == item_id
                and c.email.casefold() == email
            ),
            None,
        )
