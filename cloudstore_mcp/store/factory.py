"""Backend selection from settings."""

import logging

import httpx

from ..config import Settings
from .ai import DocumentAnalyzer, InMemoryAnalyzer
from .base import ContentStore
from .client import ApiClient
from .ledger import InMemoryLedger, SharingLedger
from .memory import InMemoryStore
from .remote import RemoteAnalyzer, RemoteLedger, RemoteStore

logger = logging.getLogger(__name__)


def create_backends(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> tuple[ContentStore, SharingLedger, DocumentAnalyzer]:
    """Build the store, ledger and analyzer the server should use.

    The remote API is used when a developer token is configured and neither
    ``BOX_USE_MOCK`` nor ``STORE_BACKEND=memory`` says otherwise.

    Args:
        settings: Loaded configuration
        transport: Optional httpx transport for the remote client (tests)

    Returns:
        Tuple of (store, ledger, analyzer) sharing one backend
    """
    if settings.use_remote_backend:
        client = ApiClient.from_settings(settings, transport=transport)
        logger.info(f"Using remote store at {settings.api_base_url}")
        return RemoteStore(client), RemoteLedger(client), RemoteAnalyzer(client)

    logger.info("Using in-memory store")
    store = InMemoryStore()
    return (
        store,
        InMemoryLedger(store, link_base_url=settings.shared_link_base_url),
        InMemoryAnalyzer(store),
    )
