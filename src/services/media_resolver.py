"""Stock media resolution for narration segments.

Picks one stock clip per script segment: provider videos first, then
provider images, then the deterministic fallback table. Provider trouble
never reaches the caller; it only changes which clip comes back.
"""

import asyncio
import logging
from typing import Optional

from models.media import MediaSearchPage, StockMediaItem
from models.script import MediaClip, ScriptSegment
from services.media_sources.base import StockMediaSource
from services.media_sources.fallback import FALLBACK_IMAGE, fallback_video_for

logger = logging.getLogger(__name__)

# The resolver only ever looks at the first hit, so there is no point asking for more.
MAX_RESOLVE_RESULTS = 5


class StockMediaResolver:
    """Resolves ScriptSegments to MediaClips through one StockMediaSource."""

    def __init__(
        self,
        source: StockMediaSource,
        per_page: int = MAX_RESOLVE_RESULTS,
        timeout_seconds: float = 15.0,
        max_concurrent: int = 4,
    ):
        """Initialize the resolver.

        Args:
            source: Provider adapter to search
            per_page: Results requested per search, capped at 5
            timeout_seconds: Upper bound for one provider search including retries
            max_concurrent: Segments resolved at the same time by resolve_all()
        """
        self.source = source
        self.per_page = max(1, min(per_page, MAX_RESOLVE_RESULTS))
        self.timeout_seconds = timeout_seconds
        self.max_concurrent = max(1, max_concurrent)

    async def resolve(self, segment: ScriptSegment) -> Optional[MediaClip]:
        """Find one stock clip for a narration segment.

        Args:
            segment: Segment to illustrate

        Returns:
            MediaClip for the segment. Provider clips take the segment's
            estimated duration, fallback clips keep the sample's length.
        """
        query = segment.search_query

        if self.source.is_configured():
            videos = await self._search(self.source.search_videos, query, 1, self.per_page)
            if videos:
                return self._to_clip(videos[0], segment, segment.duration)

            # A failed provider is not asked again for images
            if videos is not None:
                images = await self._search(self.source.search_images, query, 1, self.per_page)
                if images:
                    return self._to_clip(images[0], segment, segment.duration)
                logger.info(f"No stock media for '{query}', using fallback")
        else:
            logger.debug(f"Source '{self.source.get_source_name()}' not configured, using fallback")

        fallback = fallback_video_for(query)
        return self._to_clip(fallback, segment, float(fallback.duration))

    async def resolve_all(self, segments: list[ScriptSegment]) -> list[MediaClip]:
        """Resolve every segment concurrently, keeping narration order.

        Args:
            segments: Segments in script order

        Returns:
            One clip per resolved segment, in the same order as segments
        """
        if not segments:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def bounded(segment: ScriptSegment) -> Optional[MediaClip]:
            async with semaphore:
                return await self.resolve(segment)

        clips = await asyncio.gather(*(bounded(segment) for segment in segments))
        resolved = [clip for clip in clips if clip is not None]
        logger.info(f"Resolved {len(resolved)}/{len(segments)} segments to stock media")
        return resolved

    async def search(
        self, query: str, media_type: str = "video", page: int = 1, per_page: int = 15
    ) -> MediaSearchPage:
        """Free-text stock media search for the media browser.

        Falls back to the sample table when the provider is unconfigured or
        fails. An empty provider answer is returned as-is.

        Args:
            query: Search text
            media_type: "video" or "image"
            page: 1-based page number
            per_page: Results per page

        Returns:
            MediaSearchPage with the provider's or the sample table's items
        """
        if self.source.is_configured():
            try:
                return await asyncio.wait_for(
                    self.source.search_page(query, media_type, page, per_page),
                    timeout=self.timeout_seconds,
                )
            except Exception as e:
                logger.warning(f"Stock media search failed for '{query}': {e}")

        fallback_item = fallback_video_for(query) if media_type == "video" else FALLBACK_IMAGE
        return MediaSearchPage(items=[fallback_item], page=1, per_page=1, fallback=True)

    async def _search(self, search, query: str, page: int, per_page: int) -> Optional[list[StockMediaItem]]:
        """Run one provider search.

        Returns:
            The provider's results, or None when the search failed or timed out
        """
        try:
            return await asyncio.wait_for(search(query, page, per_page), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Stock media search timed out after {self.timeout_seconds}s for '{query}'")
        except Exception as e:
            logger.warning(f"Stock media search failed for '{query}': {e}")
        return None

    def _to_clip(self, item: StockMediaItem, segment: ScriptSegment, duration: float) -> MediaClip:
        return MediaClip(
            id=f"{segment.id}-{item.item_id}",
            url=item.url,
            type=item.type,
            duration=duration,
            segment_id=segment.id,
            keywords=list(segment.keywords),
            thumbnail=item.thumbnail,
            source=item.source,
        )
