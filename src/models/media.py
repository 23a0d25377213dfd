"""Stock media search result model."""

from dataclasses import dataclass
from typing import Optional

# Still images have no intrinsic length; shown for this long when used on their own.
DEFAULT_IMAGE_DURATION = 5.0


@dataclass
class StockMediaItem:
    """Represents a stock media search result from any source.

    Covers both short-form videos and still images. Providers return
    results best-first, so list order is the ranking.
    """

    item_id: str
    title: str
    url: str  # Direct playable/displayable URL
    type: str  # video or image
    source: str  # pexels, fallback
    thumbnail: Optional[str] = None
    duration: Optional[float] = None  # seconds, None for images
    description: Optional[str] = None
    author: Optional[str] = None
    width: int = 0
    height: int = 0

    @property
    def is_video(self) -> bool:
        """Check if this item is a video."""
        return self.type == "video"

    @property
    def display_duration(self) -> float:
        """Duration to use when the item is shown outside a narration segment."""
        if self.duration:
            return float(self.duration)
        return DEFAULT_IMAGE_DURATION

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.item_id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "duration": self.display_duration,
            "type": self.type,
            "source": self.source,
            "author": self.author,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class MediaSearchPage:
    """One page of stock media search results."""

    items: list[StockMediaItem]
    page: int = 1
    per_page: int = 15
    fallback: bool = False  # True when the items came from the sample table
    total_results: Optional[int] = None  # provider-wide match count, when reported

    @property
    def total(self) -> int:
        """Provider's total match count, or the page size when unknown."""
        return self.total_results if self.total_results is not None else len(self.items)

    @property
    def has_more(self) -> bool:
        """Whether another page of provider results exists."""
        if self.fallback:
            return False
        if self.total_results is not None:
            return self.page * self.per_page < self.total_results
        return len(self.items) >= self.per_page

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "has_more": self.has_more,
            "fallback": self.fallback,
        }
