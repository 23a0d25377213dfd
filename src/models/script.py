"""Transient models that only live for one generation run."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ScriptSegment:
    """One sentence-level narration beat of a script."""

    id: str
    text: str
    duration: float  # estimated spoken duration in seconds
    keywords: List[str] = field(default_factory=list)
    visual_intent: str = "nature landscape"

    @property
    def search_query(self) -> str:
        """Stock media query: visual intent followed by the keywords."""
        return f"{self.visual_intent} {' '.join(self.keywords)}".strip()


@dataclass
class MediaClip:
    """A stock media candidate chosen for one narration segment."""

    id: str
    url: str
    type: str  # video or image
    duration: float
    segment_id: str
    keywords: List[str] = field(default_factory=list)
    thumbnail: Optional[str] = None
    source: str = "pexels"  # pexels, fallback
