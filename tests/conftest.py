"""Shared pytest fixtures for reelsmith tests."""

import sys
import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest
import pytest_asyncio

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from models.media import StockMediaItem
from models.transcript import TranscriptionResult, TranscriptionSegment
from services.media_sources.base import StockMediaSource
from services.run_registry import RunRegistry
from services.transcription_providers.base import TranscriptionProvider
from services.video_store import VideoStore


class FakeMediaSource(StockMediaSource):
    """Scripted stock media source that records every search."""

    def __init__(self, videos=None, images=None, error: Optional[Exception] = None, configured: bool = True):
        self.videos = videos or []
        self.images = images or []
        self.error = error
        self.configured = configured
        self.calls = []

    def get_source_name(self) -> str:
        return "fake"

    def is_configured(self) -> bool:
        return self.configured

    async def search_videos(self, query, page=1, per_page=5):
        self.calls.append(("videos", query, page, per_page))
        if self.error:
            raise self.error
        return list(self.videos)

    async def search_images(self, query, page=1, per_page=5):
        self.calls.append(("images", query, page, per_page))
        if self.error:
            raise self.error
        return list(self.images)


class FakeTranscriptionProvider(TranscriptionProvider):
    """Returns a canned result, or raises a canned error."""

    def __init__(self, result: Optional[TranscriptionResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls = []

    def get_provider_name(self) -> str:
        return "fake"

    async def transcribe(self, audio_ref, language=None):
        self.calls.append((audio_ref, language))
        if self.error:
            raise self.error
        return self.result


def make_video_item(item_id: str = "101", url: str = "https://videos.pexels.com/101.mp4", duration: float = 20) -> StockMediaItem:
    return StockMediaItem(
        item_id=f"pexels_{item_id}",
        title="Video by Jane",
        url=url,
        type="video",
        source="pexels",
        thumbnail=f"https://images.pexels.com/{item_id}.jpg",
        duration=duration,
    )


def make_image_item(item_id: str = "202") -> StockMediaItem:
    return StockMediaItem(
        item_id=f"pexels_photo_{item_id}",
        title="Photo by John",
        url=f"https://images.pexels.com/photos/{item_id}/large2x.jpg",
        type="image",
        source="pexels",
        thumbnail=f"https://images.pexels.com/photos/{item_id}/medium.jpg",
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest_asyncio.fixture
async def store(temp_dir):
    """Connected VideoStore on a throwaway database."""
    video_store = VideoStore(str(temp_dir / "reelsmith.db"))
    await video_store.connect()
    yield video_store
    await video_store.close()


@pytest_asyncio.fixture
async def project(store):
    """A project owned by user-1 with a stored script."""
    return await store.create_project(
        "user-1",
        name="Nature Reel",
        description="Test project",
        script="The city wakes up. Cars fill the road.",
    )


@pytest.fixture
def registry() -> RunRegistry:
    return RunRegistry()


@pytest.fixture
def fake_media_source():
    """Factory for FakeMediaSource instances."""
    return FakeMediaSource


@pytest.fixture
def fake_transcription_provider():
    """Factory for FakeTranscriptionProvider instances."""
    return FakeTranscriptionProvider


@pytest.fixture
def video_item():
    """Factory for Pexels-like video search results."""
    return make_video_item


@pytest.fixture
def image_item():
    """Factory for Pexels-like image search results."""
    return make_image_item


@pytest.fixture
def three_segment_transcription() -> TranscriptionResult:
    """Speech-to-text result with three contiguous segments ending at 12.0s."""
    return TranscriptionResult(
        text="Hello there. This is a test. Goodbye now.",
        language="en",
        segments=[
            TranscriptionSegment(id=0, start=0.0, end=3.5, text=" Hello there.", confidence=-0.21),
            TranscriptionSegment(id=1, start=3.5, end=7.2, text=" This is a test.", confidence=-0.18),
            TranscriptionSegment(id=2, start=7.2, end=12.0, text=" Goodbye now.", confidence=-0.30),
        ],
    )
