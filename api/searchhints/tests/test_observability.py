from __future__ import annotations

import asyncio

import pytest

from searchhints.services.observability import CircuitOpenError, CollaboratorMonitor


@pytest.mark.asyncio
async def test_monitor_opens_circuit_after_repeated_failures() -> None:
    monitor = CollaboratorMonitor(circuit_threshold=2, base_backoff_seconds=0.01, max_backoff_seconds=0.02)

    async def failing_call() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await monitor.track("search_index", "search", failing_call)
    with pytest.raises(RuntimeError):
        await monitor.track("search_index", "search", failing_call)

    assert monitor.allow_call("search_index") is False
    with pytest.raises(CircuitOpenError):
        await monitor.track("search_index", "search", failing_call)

    snapshot = await monitor.snapshot()
    assert snapshot["search_index"]["circuit"]["opened_count"] == 1
    assert snapshot["search_index"]["operations"]["search"]["failed"] == 2
    assert snapshot["search_index"]["operations"]["search"]["skipped"] == 1


@pytest.mark.asyncio
async def test_monitor_recovers_after_cooldown_and_success() -> None:
    monitor = CollaboratorMonitor(circuit_threshold=1, base_backoff_seconds=0.01, max_backoff_seconds=0.02)

    async def failing_call() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await monitor.track("item_store", "by_id", failing_call)

    assert monitor.allow_call("item_store") is False
    await asyncio.sleep(0.02)

    async def ok_call() -> str:
        return "ok"

    assert await monitor.track("item_store", "by_id", ok_call, context={"item_id": "abc"}) == "ok"
    snapshot = await monitor.snapshot()
    assert snapshot["item_store"]["operations"]["by_id"]["succeeded"] == 1
    assert snapshot["item_store"]["operations"]["by_id"]["last_error"] is None
    assert snapshot["item_store"]["circuit"]["failure_streak"] == 0


@pytest.mark.asyncio
async def test_guard_returns_default_on_failure_and_timeout() -> None:
    monitor = CollaboratorMonitor(circuit_threshold=2, base_backoff_seconds=30, max_backoff_seconds=60)

    async def failing_call() -> str:
        raise RuntimeError("boom")

    async def slow_call() -> str:
        await asyncio.sleep(1)
        return "late"

    assert await monitor.guard("image_cache", "tag", failing_call) is None
    assert await monitor.guard("image_cache", "tag", slow_call, timeout=0.01, default="unset") == "unset"
    assert await monitor.guard("image_cache", "tag", failing_call, default=[]) == []

    metrics = (await monitor.snapshot())["image_cache"]["operations"]["tag"]
    assert metrics["failed"] == 3
    assert metrics["timed_out"] == 1
    assert metrics["skipped"] == 0
    assert metrics["last_error"] == "boom"


@pytest.mark.asyncio
async def test_guarded_failures_never_open_a_circuit() -> None:
    monitor = CollaboratorMonitor(circuit_threshold=1, base_backoff_seconds=30, max_backoff_seconds=60)

    async def failing_call() -> str:
        raise RuntimeError("boom")

    async def ok_call() -> str:
        return "tag-1"

    for _ in range(5):
        assert await monitor.guard("image_cache", "tag", failing_call) is None

    assert await monitor.guard("image_cache", "tag", ok_call) == "tag-1"
    snapshot = await monitor.snapshot()
    assert snapshot["image_cache"]["circuit"] is None
    assert snapshot["image_cache"]["operations"]["tag"]["succeeded"] == 1
