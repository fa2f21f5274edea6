"""Hierarchical content store, sharing ledger and document analyzer.

- base: ``ContentStore`` interface and tree building
- memory: in-memory reference store
- ledger: shared links and collaborations
- ai: document analysis capability
- remote: the same interfaces over the remote REST API
- factory: backend selection from settings
"""

from .ai import DocumentAnalyzer, InMemoryAnalyzer
from .base import ROOT_FOLDER_ID, ContentStore
from .client import ApiClient
from .errors import (
    AlreadyExistsError,
    BackendError,
    FolderNotEmptyError,
    InvalidArgumentError,
    NotFoundError,
    StoreError,
)
from .factory import create_backends
from .ledger import InMemoryLedger, SharingLedger
from .memory import InMemoryStore
from .remote import RemoteAnalyzer, RemoteLedger, RemoteStore
from .retry import RetryPolicy, call_with_retry

__all__ = [
    # Interfaces
    "ContentStore",
    "SharingLedger",
    "DocumentAnalyzer",
    "ROOT_FOLDER_ID",
    # In-memory
    "InMemoryStore",
    "InMemoryLedger",
    "InMemoryAnalyzer",
    # Remote
    "ApiClient",
    "RemoteStore",
    "RemoteLedger",
    "RemoteAnalyzer",
    "RetryPolicy",
    "call_with_retry",
    "create_backends",
    # Errors
    "StoreError",
    "NotFoundError",
    "FolderNotEmptyError",
    "InvalidArgumentError",
    "AlreadyExistsError",
    "BackendError",
]
