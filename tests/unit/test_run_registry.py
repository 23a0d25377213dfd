"""Unit tests for RunRegistry."""

import asyncio

import pytest

from services.errors import PreconditionError


async def wait_for_event(event: asyncio.Event, results: list, value: str) -> str:
    await event.wait()
    results.append(value)
    return value


class TestDispatch:
    """Tests for dispatch() and the one-run-per-video rule."""

    @pytest.mark.asyncio
    async def test_run_completes_and_is_forgotten(self, registry):
        results = []
        event = asyncio.Event()
        task = registry.dispatch("video-1", wait_for_event, event, results, "done")

        assert registry.is_active("video-1")
        assert registry.active_count == 1

        event.set()
        assert await task == "done"
        await asyncio.sleep(0)

        assert results == ["done"]
        assert not registry.is_active("video-1")
        assert registry.active_count == 0

    @pytest.mark.asyncio
    async def test_second_run_for_same_video_is_rejected(self, registry):
        event = asyncio.Event()
        registry.dispatch("video-1", wait_for_event, event, [], "first")

        with pytest.raises(PreconditionError):
            registry.dispatch("video-1", wait_for_event, event, [], "second")

        event.set()
        await registry.wait("video-1")

    @pytest.mark.asyncio
    async def test_different_videos_run_concurrently(self, registry):
        event = asyncio.Event()
        registry.dispatch("video-1", wait_for_event, event, [], "a")
        registry.dispatch("video-2", wait_for_event, event, [], "b")
        assert registry.active_count == 2

        event.set()
        assert await registry.drain(timeout=1.0) == 0

    @pytest.mark.asyncio
    async def test_video_can_run_again_after_finishing(self, registry):
        results = []
        event = asyncio.Event()
        event.set()

        registry.dispatch("video-1", wait_for_event, event, results, "first")
        await registry.wait("video-1")
        await asyncio.sleep(0)
        registry.dispatch("video-1", wait_for_event, event, results, "second")
        await registry.wait("video-1")

        assert results == ["first", "second"]

    @pytest.mark.asyncio
    async def test_failed_run_is_cleaned_up(self, registry):
        async def explode():
            raise RuntimeError("escaped")

        registry.dispatch("video-1", explode)
        await registry.wait("video-1")
        await asyncio.sleep(0)

        assert not registry.is_active("video-1")

    @pytest.mark.asyncio
    async def test_wait_without_run_returns_immediately(self, registry):
        await registry.wait("unknown")


class TestDrain:
    """Tests for drain() at shutdown."""

    @pytest.mark.asyncio
    async def test_nothing_to_drain(self, registry):
        assert await registry.drain() == 0

    @pytest.mark.asyncio
    async def test_reports_runs_that_outlive_timeout(self, registry):
        event = asyncio.Event()
        task = registry.dispatch("video-1", wait_for_event, event, [], "slow")

        assert await registry.drain(timeout=0.01) == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
