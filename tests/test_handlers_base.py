"""
Tests for the shared handler helpers.
"""

import asyncio

import pytest

from cloudstore_mcp.engine.handlers.base import resolve_file_id, run_batch
from cloudstore_mcp.store import NotFoundError


class TestRunBatch:
    async def test_order_and_bound(self) -> None:
        in_flight = 0
        peak = 0

        async def worker(n: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            # Later items finish first
            await asyncio.sleep(0.001 * (10 - n))
            in_flight -= 1
            return n * 10

        results = await run_batch(range(10), worker, lambda n, e: -1, concurrency=3)
        assert results == [n * 10 for n in range(10)]
        assert peak <= 3

    async def test_failures_become_entries(self) -> None:
        async def worker(n: int) -> str:
            if n == 1:
                raise RuntimeError("bad item")
            return f"ok {n}"

        results = await run_batch(
            [0, 1, 2], worker, lambda n, e: f"failed {n}: {e}", concurrency=2
        )
        assert results == ["ok 0", "failed 1: bad item", "ok 2"]

    async def test_zero_concurrency_still_runs(self) -> None:
        async def worker(n: int) -> int:
            return n

        assert await run_batch([1, 2], worker, lambda n, e: 0, concurrency=0) == [1, 2]


class TestResolveFileId:
    async def test_resolves(self, ctx, store) -> None:
        folder_id = await store.ensure_folder_path("A")
        handle = await store.upload_file(folder_id, "x.txt", b"x")
        assert await resolve_file_id(ctx, "/A/x.txt") == handle.id

    async def test_missing(self, ctx) -> None:
        with pytest.raises(NotFoundError, match="File not found: A/y.txt"):
            await resolve_file_id(ctx, "A/y.txt")
