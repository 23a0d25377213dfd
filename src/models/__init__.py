# Data models for reelsmith
from .project import Project, Video, VideoStatus, Caption, VideoSegment
from .script import ScriptSegment, MediaClip
from .media import StockMediaItem, MediaSearchPage, DEFAULT_IMAGE_DURATION
from .transcript import TranscriptionResult, TranscriptionSegment

__all__ = [
    # Persisted entities
    "Project",
    "Video",
    "VideoStatus",
    "Caption",
    "VideoSegment",
    # Generation run
    "ScriptSegment",
    "MediaClip",
    # Stock media
    "StockMediaItem",
    "MediaSearchPage",
    "DEFAULT_IMAGE_DURATION",
    # Transcription
    "TranscriptionResult",
    "TranscriptionSegment",
]
