"""Stock media sources for script-driven timeline assembly."""

from services.media_sources.base import StockMediaSource
from services.media_sources.fallback import FallbackMediaSource, fallback_video_for
from services.media_sources.pexels import PexelsMediaSource

__all__ = ["StockMediaSource", "FallbackMediaSource", "PexelsMediaSource", "fallback_video_for"]
