"""Pexels media source for professional CC0-licensed stock footage and photos."""

import asyncio
import logging
import os
from typing import Optional

import aiohttp

from models.media import MediaSearchPage, StockMediaItem
from services.errors import ProviderError
from services.media_sources.base import StockMediaSource
from utils.retry import APIRateLimitError, NetworkError, TemporaryServiceError, retry_api_call

logger = logging.getLogger(__name__)


class PexelsMediaSource(StockMediaSource):
    """Pexels source for CC0-licensed stock videos and photos.

    API Documentation: https://www.pexels.com/api/documentation/

    To get an API key:
    1. Create a free account at https://www.pexels.com
    2. Go to https://www.pexels.com/api/new/ to generate an API key

    Rate limits: 200 requests per hour, 20,000 requests per month
    """

    VIDEO_SEARCH_URL = "https://api.pexels.com/videos/search"
    IMAGE_SEARCH_URL = "https://api.pexels.com/v1/search"
    MAX_PER_PAGE = 80  # Pexels API limit

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: float = 15.0):
        """Initialize Pexels media source.

        Args:
            api_key: Pexels API key, defaults to PEXELS_API_KEY
            timeout_seconds: Upper bound for a single HTTP request
        """
        self.api_key = api_key if api_key is not None else os.getenv("PEXELS_API_KEY", "")
        self.timeout_seconds = timeout_seconds

        if not self.api_key:
            logger.warning(
                "[Pexels] No API key configured. Set PEXELS_API_KEY to enable Pexels search."
            )

    def get_source_name(self) -> str:
        """Get the name of this media source."""
        return "pexels"

    def is_configured(self) -> bool:
        """Check if this source has required configuration."""
        return bool(self.api_key)

    async def search_videos(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Search Pexels for landscape videos matching the query.

        Raises:
            ProviderError: No API key, or Pexels rejected the request
            NetworkError: Pexels unreachable or timed out after retries
            TemporaryServiceError: Pexels rate limited or failing after retries
        """
        if not query.strip():
            return []

        data = await self._get(self.VIDEO_SEARCH_URL, query, page, per_page)
        results = self._parse_videos(data)

        logger.debug(f"[Pexels] Found {len(results)} videos for '{query}'")
        return results

    async def search_images(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Search Pexels for landscape photos matching the query.

        Raises:
            ProviderError: No API key, or Pexels rejected the request
            NetworkError: Pexels unreachable or timed out after retries
            TemporaryServiceError: Pexels rate limited or failing after retries
        """
        if not query.strip():
            return []

        data = await self._get(self.IMAGE_SEARCH_URL, query, page, per_page)
        results = self._parse_photos(data)

        logger.debug(f"[Pexels] Found {len(results)} images for '{query}'")
        return results

    async def search_page(
        self, query: str, media_type: str = "video", page: int = 1, per_page: int = 15
    ) -> MediaSearchPage:
        """Search one page and keep Pexels' total_results for paging."""
        if not query.strip():
            return MediaSearchPage(items=[], page=page, per_page=per_page, total_results=0)

        if media_type == "video":
            data = await self._get(self.VIDEO_SEARCH_URL, query, page, per_page)
            items = self._parse_videos(data)
        else:
            data = await self._get(self.IMAGE_SEARCH_URL, query, page, per_page)
            items = self._parse_photos(data)

        total_results = data.get("total_results")
        return MediaSearchPage(
            items=items,
            page=page,
            per_page=per_page,
            total_results=int(total_results) if total_results is not None else None,
        )

    def _parse_videos(self, data: dict) -> list[StockMediaItem]:
        items = (self._parse_video(video) for video in data.get("videos") or [])
        return [item for item in items if item]

    def _parse_photos(self, data: dict) -> list[StockMediaItem]:
        items = (self._parse_photo(photo) for photo in data.get("photos") or [])
        return [item for item in items if item]

    @retry_api_call(max_retries=2, base_delay=0.5, max_delay=2.0)
    async def _get(self, url: str, query: str, page: int, per_page: int) -> dict:
        """Issue one search request and return the decoded JSON body."""
        if not self.api_key:
            raise ProviderError("Pexels API key is not configured")

        headers = {"Authorization": self.api_key}
        params = {
            "query": query,
            "page": str(max(page, 1)),
            "per_page": str(min(max(per_page, 1), self.MAX_PER_PAGE)),
            "orientation": "landscape",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=headers, params=params) as response:
                    if response.status == 401:
                        logger.error("[Pexels] Invalid API key")
                        raise ProviderError("Pexels rejected the API key")

                    if response.status == 429:
                        logger.warning("[Pexels] Rate limit exceeded")
                        raise APIRateLimitError("Pexels rate limit exceeded")

                    if response.status >= 500:
                        raise TemporaryServiceError(f"Pexels API returned status {response.status}")

                    if response.status != 200:
                        raise ProviderError(f"Pexels API returned status {response.status}")

                    return await response.json()

        except aiohttp.ClientError as e:
            logger.error(f"[Pexels] Network error: {e}")
            raise NetworkError(f"Pexels network error: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"[Pexels] Request timed out after {self.timeout_seconds}s")
            raise NetworkError("Pexels request timed out") from e

    def _parse_video(self, video: dict) -> Optional[StockMediaItem]:
        """Parse Pexels API video response into StockMediaItem.

        Args:
            video: Video dict from Pexels API

        Returns:
            StockMediaItem or None if the entry has no usable file
        """
        video_id = str(video.get("id", ""))
        if not video_id:
            return None

        video_files = video.get("video_files") or []
        if not video_files:
            return None

        # Prefer MP4 files, highest resolution first
        mp4_files = [f for f in video_files if f.get("file_type") == "video/mp4"] or video_files
        best_file = max(mp4_files, key=lambda f: f.get("height") or 0)
        download_url = best_file.get("link") or video.get("url", "")
        if not download_url:
            return None

        pictures = video.get("video_pictures") or []
        thumbnail = pictures[0].get("picture") if pictures else video.get("image")

        author = (video.get("user") or {}).get("name", "Unknown")
        width = video.get("width") or 0
        height = video.get("height") or 0

        return StockMediaItem(
            item_id=f"pexels_{video_id}",
            title=f"Video by {author}",
            description=f"HD video ({width}x{height})",
            url=download_url,
            thumbnail=thumbnail,
            duration=float(video.get("duration") or 0) or None,
            type="video",
            source="pexels",
            author=author,
            width=width,
            height=height,
        )

    def _parse_photo(self, photo: dict) -> Optional[StockMediaItem]:
        """Parse Pexels API photo response into StockMediaItem.

        Args:
            photo: Photo dict from Pexels API

        Returns:
            StockMediaItem or None if the entry has no image URL
        """
        photo_id = str(photo.get("id", ""))
        if not photo_id:
            return None

        src = photo.get("src") or {}
        url = src.get("large2x") or src.get("original")
        if not url:
            return None

        photographer = photo.get("photographer", "Unknown")
        width = photo.get("width") or 0
        height = photo.get("height") or 0

        return StockMediaItem(
            item_id=f"pexels_photo_{photo_id}",
            title=photo.get("alt") or f"Photo by {photographer}",
            description=f"High quality image ({width}x{height})",
            url=url,
            thumbnail=src.get("medium"),
            type="image",
            source="pexels",
            author=photographer,
            width=width,
            height=height,
        )
