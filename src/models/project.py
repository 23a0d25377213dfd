"""Persisted entities: projects, videos, captions and timeline segments."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class VideoStatus(str, enum.Enum):
    """Lifecycle status of a video record."""

    UPLOADING = "UPLOADING"
    PROCESSING = "PROCESSING"
    TRANSCRIBING = "TRANSCRIBING"
    READY = "READY"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        """READY and ERROR end a pipeline run."""
        return self in (VideoStatus.READY, VideoStatus.ERROR)

    def can_transition_to(self, target: "VideoStatus") -> bool:
        """Check whether a pipeline may move a video from this status to target.

        Restarting a finished video is not a transition; it is a new run and
        goes through VideoStore.restart_video().
        """
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    VideoStatus.UPLOADING: {VideoStatus.PROCESSING, VideoStatus.TRANSCRIBING, VideoStatus.ERROR},
    VideoStatus.PROCESSING: {VideoStatus.TRANSCRIBING, VideoStatus.READY, VideoStatus.ERROR},
    VideoStatus.TRANSCRIBING: {VideoStatus.READY, VideoStatus.ERROR},
    VideoStatus.READY: set(),
    VideoStatus.ERROR: set(),
}


@dataclass
class Project:
    """A user's video project, optionally holding the script to generate from."""

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    script: Optional[str] = None
    medium: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "script": self.script,
            "medium": self.medium,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Video:
    """An uploaded or generated video and its pipeline status."""

    id: str
    user_id: str
    project_id: str
    title: str
    filename: str
    status: VideoStatus = VideoStatus.UPLOADING
    description: Optional[str] = None
    original_url: str = ""
    processed_url: str = ""
    duration: Optional[float] = None  # seconds
    size: Optional[int] = None  # bytes
    format: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "description": self.description,
            "filename": self.filename,
            "original_url": self.original_url,
            "processed_url": self.processed_url,
            "duration": self.duration,
            "size": self.size,
            "format": self.format,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Caption:
    """A time-stamped transcript fragment attached to a video."""

    id: str
    video_id: str
    text: str
    start_time: float
    end_time: float
    language: str = "en"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "video_id": self.video_id,
            "text": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "language": self.language,
        }


@dataclass
class VideoSegment:
    """A time-positioned entry in a video's assembled timeline."""

    id: str
    video_id: str
    position: int
    type: str  # video, image, audio
    title: str
    url: str
    start_time: float
    end_time: float
    description: str = ""
    thumbnail: Optional[str] = None
    keywords: List[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Segment length in seconds."""
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "video_id": self.video_id,
            "position": self.position,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "keywords": list(self.keywords),
        }
