"""
Shared pytest fixtures for cloudstore-mcp tests.

Every test gets a fresh in-memory backend trio wired into a handler
context, registry and dispatcher; nothing is shared between tests.
"""

import pytest

from cloudstore_mcp.config import Settings
from cloudstore_mcp.engine.handlers import HandlerContext
from cloudstore_mcp.mcp import McpDispatcher, build_default_registry
from cloudstore_mcp.store import InMemoryAnalyzer, InMemoryLedger, InMemoryStore

# ============================================================================
# Backends
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        transport="stdio",
        store_backend="memory",
        developer_token=None,
        auth_token=None,
        batch_concurrency=4,
        debug=True,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def ledger(store: InMemoryStore) -> InMemoryLedger:
    return InMemoryLedger(store, link_base_url="https://share.test/s")


@pytest.fixture
def analyzer(store: InMemoryStore) -> InMemoryAnalyzer:
    return InMemoryAnalyzer(store)


@pytest.fixture
def ctx(store, ledger, analyzer, settings) -> HandlerContext:
    return HandlerContext(store=store, ledger=ledger, analyzer=analyzer, settings=settings)


# ============================================================================
# Protocol
# ============================================================================


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def dispatcher(registry, ctx) -> McpDispatcher:
    return McpDispatcher(registry, ctx)
