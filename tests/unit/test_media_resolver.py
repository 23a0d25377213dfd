"""Unit tests for StockMediaResolver."""

import asyncio

import pytest

from models.script import ScriptSegment
from services.errors import ProviderError
from services.media_resolver import StockMediaResolver
from services.media_sources import FallbackMediaSource
from utils.retry import APIRateLimitError, NetworkError


def make_segment(index=0, text="City lights", intent="city skyline", keywords=None, duration=4.2):
    return ScriptSegment(
        id=f"segment-{index}",
        text=text,
        duration=duration,
        keywords=["urban"] if keywords is None else keywords,
        visual_intent=intent,
    )


class TestResolve:
    """Tests for resolve()."""

    @pytest.mark.asyncio
    async def test_first_video_wins_and_takes_segment_duration(self, fake_media_source, video_item):
        source = fake_media_source(videos=[video_item("1", duration=30), video_item("2")])
        resolver = StockMediaResolver(source)

        clip = await resolver.resolve(make_segment(duration=4.2))

        assert clip.url == "https://videos.pexels.com/101.mp4"
        assert clip.type == "video"
        assert clip.duration == 4.2
        assert clip.segment_id == "segment-0"
        assert clip.keywords == ["urban"]
        assert clip.source == "pexels"
        assert source.calls == [("videos", "city skyline urban", 1, 5)]

    @pytest.mark.asyncio
    async def test_falls_back_to_images_when_no_videos(self, fake_media_source, image_item):
        source = fake_media_source(videos=[], images=[image_item("7")])
        clip = await StockMediaResolver(source).resolve(make_segment(duration=3.0))

        assert clip.type == "image"
        assert clip.url == "https://images.pexels.com/photos/7/large2x.jpg"
        assert clip.duration == 3.0
        assert [call[0] for call in source.calls] == ["videos", "images"]

    @pytest.mark.asyncio
    async def test_no_results_uses_fallback_table(self, fake_media_source):
        source = fake_media_source()
        clip = await StockMediaResolver(source).resolve(make_segment())

        assert clip.source == "fallback"
        assert clip.duration == 12

    @pytest.mark.asyncio
    async def test_city_fallback_when_provider_unreachable(self, fake_media_source):
        """Query 'city urban skyline' falls back to the 12 second city clip."""
        source = fake_media_source(error=NetworkError("connection refused"))
        segment = make_segment(intent="city", keywords=["urban", "skyline"])
        assert segment.search_query == "city urban skyline"

        clip = await StockMediaResolver(source).resolve(segment)

        assert clip is not None
        assert clip.source == "fallback"
        assert clip.id.endswith("fallback-4")
        assert clip.duration == 12

    @pytest.mark.asyncio
    async def test_unconfigured_source_is_never_called(self, fake_media_source):
        source = fake_media_source(configured=False)
        clip = await StockMediaResolver(source).resolve(make_segment())

        assert source.calls == []
        assert clip.duration == 12

    @pytest.mark.asyncio
    async def test_provider_error_does_not_propagate(self, fake_media_source):
        source = fake_media_source(error=ProviderError("Pexels rejected the API key"))
        clip = await StockMediaResolver(source).resolve(make_segment(intent="sunset landscape", keywords=[]))
        assert clip.duration == 10

    @pytest.mark.asyncio
    async def test_slow_provider_times_out_to_fallback(self, fake_media_source):
        class SlowSource(fake_media_source):
            async def search_videos(self, query, page=1, per_page=5):
                self.calls.append(("videos", query, page, per_page))
                await asyncio.sleep(5)
                return []

        source = SlowSource()
        resolver = StockMediaResolver(source, timeout_seconds=0.05)

        started = asyncio.get_running_loop().time()
        clip = await resolver.resolve(make_segment())
        elapsed = asyncio.get_running_loop().time() - started

        assert clip.source == "fallback"
        assert [call[0] for call in source.calls] == ["videos"]
        assert elapsed < 1.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [NetworkError("connection refused"), APIRateLimitError("Pexels rate limit exceeded")],
    )
    async def test_failed_video_search_skips_image_search(self, fake_media_source, image_item, error):
        source = fake_media_source(images=[image_item("7")], error=error)
        clip = await StockMediaResolver(source).resolve(make_segment())

        assert source.calls == [("videos", "city skyline urban", 1, 5)]
        assert clip.source == "fallback"
        assert clip.duration == 12

    @pytest.mark.asyncio
    async def test_fallback_is_deterministic(self):
        resolver = StockMediaResolver(FallbackMediaSource())
        segment = make_segment(intent="mountain landscape", keywords=["peak"])

        first = await resolver.resolve(segment)
        second = await resolver.resolve(segment)

        assert first == second

    def test_per_page_is_capped(self, fake_media_source):
        assert StockMediaResolver(fake_media_source(), per_page=50).per_page == 5


class TestResolveAll:
    """Tests for resolve_all()."""

    @pytest.mark.asyncio
    async def test_keeps_narration_order(self, fake_media_source):
        class StaggeredSource(fake_media_source):
            """Answers later segments first."""

            async def search_videos(self, query, page=1, per_page=5):
                delay = {"first": 0.03, "second": 0.02, "third": 0.0}[query.split()[-1]]
                await asyncio.sleep(delay)
                return []

        segments = [
            make_segment(i, intent="nature", keywords=[word])
            for i, word in enumerate(["first", "second", "third"])
        ]
        clips = await StockMediaResolver(StaggeredSource(), max_concurrent=3).resolve_all(segments)

        assert [clip.segment_id for clip in clips] == ["segment-0", "segment-1", "segment-2"]

    @pytest.mark.asyncio
    async def test_empty_input(self, fake_media_source):
        assert await StockMediaResolver(fake_media_source()).resolve_all([]) == []


class TestSearch:
    """Tests for the free-text media search."""

    @pytest.mark.asyncio
    async def test_returns_provider_results(self, fake_media_source, video_item):
        source = fake_media_source(videos=[video_item("1"), video_item("2")])
        page = await StockMediaResolver(source).search("ocean", media_type="video", page=2, per_page=2)

        assert len(page.items) == 2
        assert page.page == 2
        assert page.fallback is False
        assert page.has_more is True
        assert source.calls == [("videos", "ocean", 2, 2)]

    @pytest.mark.asyncio
    async def test_provider_failure_returns_fallback(self, fake_media_source):
        source = fake_media_source(error=ProviderError("boom"))
        page = await StockMediaResolver(source).search("sunset beach", media_type="video")

        assert page.fallback is True
        assert [item.item_id for item in page.items] == ["fallback-1"]
        assert page.to_dict()["has_more"] is False

    @pytest.mark.asyncio
    async def test_unconfigured_image_search_returns_sample_image(self, fake_media_source):
        page = await StockMediaResolver(fake_media_source(configured=False)).search("x", media_type="image")

        assert page.fallback is True
        assert page.items[0].item_id == "fallback-image"
        assert page.to_dict()["items"][0]["duration"] == 5.0
