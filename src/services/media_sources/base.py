"""Base abstraction for stock media sources."""

from abc import ABC, abstractmethod

from models.media import MediaSearchPage, StockMediaItem


class StockMediaSource(ABC):
    """Abstract base class for stock media sources (Pexels, fallback samples)."""

    @abstractmethod
    async def search_videos(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Search for short-form videos matching the query.

        Args:
            query: Free-text search query
            page: 1-based result page
            per_page: Maximum number of results to return

        Returns:
            Matching videos, best match first
        """

    @abstractmethod
    async def search_images(self, query: str, page: int = 1, per_page: int = 5) -> list[StockMediaItem]:
        """Search for still images matching the query.

        Args:
            query: Free-text search query
            page: 1-based result page
            per_page: Maximum number of results to return

        Returns:
            Matching images, best match first
        """

    async def search_page(
        self, query: str, media_type: str = "video", page: int = 1, per_page: int = 15
    ) -> MediaSearchPage:
        """Search one page for the media browser.

        Default implementation wraps search_videos()/search_images() and
        leaves total_results unknown. Override when the provider reports it.
        """
        search = self.search_videos if media_type == "video" else self.search_images
        items = await search(query, page, per_page)
        return MediaSearchPage(items=items, page=page, per_page=per_page)

    @abstractmethod
    def get_source_name(self) -> str:
        """Get the name of this media source.

        Returns:
            Source name (e.g., "pexels", "fallback")
        """

    def is_configured(self) -> bool:
        """Check if this source has required configuration (API keys, etc.).

        Default implementation returns True (no config required).
        Override in subclasses that require API keys.

        Returns:
            True if source is properly configured and ready to use
        """
        return True
