"""Deterministic sample media used when no stock provider can answer.

The table is keyed by substrings of the lowercased query, checked in
order, so the same query always yields the same item.
"""

from models.media import StockMediaItem
from services.media_sources.base import StockMediaSource

SAMPLE_VIDEO_URL = "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_1mb.mp4"

FALLBACK_VIDEOS = (
    (
        ("sunset", "ocean"),
        StockMediaItem(
            item_id="fallback-1",
            title="Beautiful Sunset Scene",
            description="HD video (1280x720)",
            url=SAMPLE_VIDEO_URL,
            thumbnail="https://via.placeholder.com/320x180/ff6b35/ffffff?text=Sunset+Video",
            duration=10,
            type="video",
            source="fallback",
            author="Sample Content",
            width=1280,
            height=720,
        ),
    ),
    (
        ("mountain", "landscape"),
        StockMediaItem(
            item_id="fallback-2",
            title="Mountain Landscape",
            description="HD video (1280x720)",
            url=SAMPLE_VIDEO_URL,
            thumbnail="https://via.placeholder.com/320x180/10b981/ffffff?text=Mountain+Video",
            duration=8,
            type="video",
            source="fallback",
            author="Sample Content",
            width=1280,
            height=720,
        ),
    ),
    (
        ("city", "urban"),
        StockMediaItem(
            item_id="fallback-4",
            title="City Skyline",
            description="HD video (1280x720)",
            url=SAMPLE_VIDEO_URL,
            thumbnail="https://via.placeholder.com/320x180/6366f1/ffffff?text=City+Video",
            duration=12,
            type="video",
            source="fallback",
            author="Sample Content",
            width=1280,
            height=720,
        ),
    ),
)

DEFAULT_FALLBACK_VIDEO = StockMediaItem(
    item_id="fallback-3",
    title="Sample Video Content",
    description="HD video (1280x720)",
    url=SAMPLE_VIDEO_URL,
    thumbnail="https://via.placeholder.com/320x180/6b7280/ffffff?text=Sample+Video",
    duration=10,
    type="video",
    source="fallback",
    author="Sample Content",
    width=1280,
    height=720,
)

FALLBACK_IMAGE = StockMediaItem(
    item_id="fallback-image",
    title="Sample Image",
    description="High quality image (1920x1080)",
    url="https://via.placeholder.com/1920x1080/3b82f6/ffffff?text=Sample+Image",
    thumbnail="https://via.placeholder.com/320x180/3b82f6/ffffff?text=Sample+Image",
    type="image",
    source="fallback",
    author="Sample Content",
    width=1920,
    height=1080,
)


def fallback_video_for(query: str) -> StockMediaItem:
    """Pick the sample video whose trigger appears in the query."""
    lowered = query.lower()
    for triggers, item in FALLBACK_VIDEOS:
        if any(trigger in lowered for trigger in triggers):
            return item
    return DEFAULT_FALLBACK_VIDEO


class FallbackMediaSource(StockMediaSource):
    """Offline media source backed by the static sample table.

    Always configured and never touches the network.
    """

    def get_source_name(self) -> str:
        """Get the name of this media source."""
        return "fallback"

    async def search_videos(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Return the single sample video matching the query."""
        return [fallback_video_for(query)]

    async def search_images(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Return the generic sample image."""
        return [FALLBACK_IMAGE]
