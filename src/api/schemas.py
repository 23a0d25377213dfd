"""Pydantic request/response models for the Reelsmith API."""

from pydantic import BaseModel, Field

# =============================================================================
# Response Models
# =============================================================================


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str

    model_config = {"json_schema_extra": {"examples": [{"message": "Operation completed successfully"}]}}


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "Reelsmith API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    active_runs: int = 0

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy", "active_runs": 0}]}}


class ProjectResponse(BaseModel):
    """A video project."""

    id: str
    name: str
    description: str | None = None
    script: str | None = None
    medium: str | None = None
    created_at: str
    updated_at: str


class VideoResponse(BaseModel):
    """A video record and its pipeline status."""

    id: str
    project_id: str
    title: str
    description: str | None = None
    filename: str
    original_url: str
    processed_url: str
    duration: float | None = None
    size: int | None = None
    format: str | None = None
    status: str
    created_at: str
    updated_at: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "project_id": "9b2f7c1e-3d4a-4f5b-8c6d-7e8f9a0b1c2d",
                    "title": "AI Generated Video from Script",
                    "description": 'Generated from script: "A beautiful sunset over the ocean..."',
                    "filename": "ai_video_1760745600000.mp4",
                    "original_url": "",
                    "processed_url": "",
                    "duration": None,
                    "size": None,
                    "format": None,
                    "status": "PROCESSING",
                    "created_at": "2026-10-18T12:00:00+00:00",
                    "updated_at": "2026-10-18T12:00:00+00:00",
                }
            ]
        }
    }


class CaptionResponse(BaseModel):
    """A time-stamped caption."""

    id: str
    video_id: str
    text: str
    start_time: float
    end_time: float
    language: str


class ProjectDetailResponse(ProjectResponse):
    """A project with its videos."""

    videos: list[VideoResponse] = []


class VideoDetailResponse(VideoResponse):
    """A video with its captions."""

    captions: list[CaptionResponse] = []


class VideoSegmentResponse(BaseModel):
    """One entry of an assembled timeline."""

    id: str
    video_id: str
    position: int
    type: str
    title: str
    description: str
    url: str
    thumbnail: str
    start_time: float
    end_time: float
    duration: float
    keywords: list[str] = []


class TimelineResponse(BaseModel):
    """A video's assembled timeline."""

    video_id: str
    segments: list[VideoSegmentResponse]
    total_duration: float


class RunStartedResponse(BaseModel):
    """Acknowledgement that a background run was started."""

    id: str
    status: str
    message: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "status": "PROCESSING",
                    "message": "Video generation started",
                }
            ]
        }
    }


class TranscriptionResponse(BaseModel):
    """A video's captions."""

    video_id: str
    status: str
    language: str
    captions: list[CaptionResponse]


class MediaItemResponse(BaseModel):
    """A stock media search result."""

    id: str
    title: str
    description: str | None = None
    url: str
    thumbnail: str | None = None
    duration: float
    type: str
    source: str
    author: str | None = None
    width: int = 0
    height: int = 0


class MediaSearchResponse(BaseModel):
    """One page of stock media search results."""

    items: list[MediaItemResponse]
    total: int
    page: int
    per_page: int
    has_more: bool
    fallback: bool = False


class LanguageResponse(BaseModel):
    """A transcription language option."""

    code: str
    name: str


class LanguagesResponse(BaseModel):
    """Transcription languages and pricing."""

    provider: str
    languages: list[LanguageResponse]
    price_per_minute: float


# =============================================================================
# Request Models
# =============================================================================


class ProjectCreateRequest(BaseModel):
    """Request to create a project."""

    name: str = ""
    description: str | None = None
    script: str | None = None
    medium: str | None = None


class ProjectUpdateRequest(BaseModel):
    """Request to update a project. Send script alone to save a script."""

    name: str | None = None
    description: str | None = None
    script: str | None = None
    medium: str | None = None


class VideoUpdateRequest(BaseModel):
    """Request to update owner-editable video fields."""

    title: str | None = None
    description: str | None = None


class GenerateVideoRequest(BaseModel):
    """Request to generate a timeline from a script."""

    project_id: str = ""
    script: str = ""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "project_id": "9b2f7c1e-3d4a-4f5b-8c6d-7e8f9a0b1c2d",
                    "script": "A beautiful sunset over the ocean. Birds fly overhead.",
                }
            ]
        }
    }


class RegenerateRequest(BaseModel):
    """Request to regenerate a finished video, optionally with a new script."""

    script: str | None = None


class TranscribeRequest(BaseModel):
    """Request to transcribe a video."""

    language: str | None = Field(default=None, description="Language hint, e.g. 'en', or 'auto'")


class CaptionUpdateRequest(BaseModel):
    """Request to edit a caption."""

    text: str | None = None
    start_time: float | None = Field(default=None, ge=0)
    end_time: float | None = Field(default=None, ge=0)
