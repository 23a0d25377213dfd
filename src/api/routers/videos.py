"""Video routes for the Reelsmith API: upload, CRUD and timeline."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Annotated

from api.dependencies import Store, UserId, get_config
from api.schemas import (
    MessageResponse,
    TimelineResponse,
    VideoDetailResponse,
    VideoResponse,
    VideoUpdateRequest,
)
from fastapi import APIRouter, File, Form, Query, UploadFile
from models.project import VideoStatus
from services.errors import NotFoundOrUnauthorized, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])

PLACEHOLDER_THUMBNAIL = "https://via.placeholder.com/120x68/6b7280/ffffff?text=No+Thumbnail"
UPLOAD_CHUNK_SIZE = 1024 * 1024


@router.post(
    "/api/videos/upload",
    response_model=VideoResponse,
    status_code=201,
    summary="Upload video",
    responses={400: {"description": "Missing file, wrong type or too large"}, 404: {"description": "Project not found"}},
)
async def upload_video(
    user_id: UserId,
    store: Store,
    video: UploadFile = File(...),
    project_id: Annotated[str, Form()] = "",
) -> dict:
    """Store an uploaded video file and register it as UPLOADING."""
    if not video.filename:
        raise ValidationError("No video file provided")
    if not project_id:
        raise ValidationError("No project_id provided")
    if not (video.content_type or "").startswith("video/"):
        raise ValidationError("Invalid file type")

    project = await store.get_project(project_id, user_id)
    if project is None:
        raise NotFoundOrUnauthorized("Project", project_id)

    config = get_config()
    max_bytes = config["max_upload_size_mb"] * 1024 * 1024
    upload_dir = Path(config["upload_dir"])
    upload_dir.mkdir(parents=True, exist_ok=True)

    original = Path(video.filename)
    extension = original.suffix.lstrip(".").lower() or "mp4"
    filename = f"video_{int(time.time() * 1000)}.{extension}"
    file_path = upload_dir / filename

    # BaseException also covers cancellation when the client disconnects
    try:
        size = await _save_upload(video, file_path, max_bytes)
        record = await store.create_video(
            user_id=user_id,
            project_id=project.id,
            title=original.stem,
            filename=filename,
            status=VideoStatus.UPLOADING,
            original_url=f"/uploads/{filename}",
            size=size,
            format=extension,
        )
    except BaseException:
        file_path.unlink(missing_ok=True)
        raise

    logger.info(f"Stored upload {video.filename} as {filename} ({size / 1024 / 1024:.1f} MB)")
    return record.to_dict()


async def _save_upload(video: UploadFile, file_path: Path, max_bytes: int) -> int:
    """Stream an upload to disk in chunks, returning its size in bytes."""
    size = 0
    f = await asyncio.to_thread(file_path.open, "wb")
    try:
        while chunk := await video.read(UPLOAD_CHUNK_SIZE):
            size += len(chunk)
            if size > max_bytes:
                raise ValidationError(f"File too large (limit {max_bytes // (1024 * 1024)} MB)")
            await asyncio.to_thread(f.write, chunk)
    finally:
        await asyncio.to_thread(f.close)
    return size


@router.get("/api/videos", response_model=list[VideoResponse], summary="List videos")
async def list_videos(user_id: UserId, store: Store, project_id: Annotated[str | None, Query()] = None) -> list[dict]:
    """List the caller's videos, optionally within one project."""
    videos = await store.list_videos(user_id, project_id=project_id)
    return [video.to_dict() for video in videos]


@router.get(
    "/api/videos/{video_id}",
    response_model=VideoDetailResponse,
    summary="Get video",
    responses={404: {"description": "Video not found"}},
)
async def get_video(video_id: str, user_id: UserId, store: Store) -> dict:
    """Get a video with its captions. Poll this to follow a pipeline run."""
    video = await store.get_video(video_id, user_id)
    if video is None:
        raise NotFoundOrUnauthorized("Video", video_id)

    captions = await store.list_captions(video_id)
    return {**video.to_dict(), "captions": [caption.to_dict() for caption in captions]}


@router.put(
    "/api/videos/{video_id}",
    response_model=VideoResponse,
    summary="Update video",
    responses={404: {"description": "Video not found"}},
)
async def update_video(video_id: str, request: VideoUpdateRequest, user_id: UserId, store: Store) -> dict:
    """Update a video's title and/or description."""
    fields = request.model_dump(exclude_none=True)
    if "title" in fields and not fields["title"].strip():
        raise ValidationError("Title cannot be empty")

    video = await store.update_video(video_id, user_id, **fields)
    if video is None:
        raise NotFoundOrUnauthorized("Video", video_id)
    return video.to_dict()


@router.delete(
    "/api/videos/{video_id}",
    response_model=MessageResponse,
    summary="Delete video",
    responses={404: {"description": "Video not found"}},
)
async def delete_video(video_id: str, user_id: UserId, store: Store) -> dict:
    """Delete a video with its captions and timeline."""
    video = await store.get_video(video_id, user_id)
    if video is None:
        raise NotFoundOrUnauthorized("Video", video_id)

    await store.delete_video(video_id, user_id)

    if video.original_url.startswith("/uploads/"):
        (Path(get_config()["upload_dir"]) / video.filename).unlink(missing_ok=True)

    return {"message": "Video deleted successfully"}


@router.get(
    "/api/videos/{video_id}/segments",
    response_model=TimelineResponse,
    summary="Get video timeline",
    responses={404: {"description": "Video not found"}},
)
async def get_video_segments(video_id: str, user_id: UserId, store: Store) -> dict:
    """Get a video's assembled timeline, ordered by start time."""
    video = await store.get_video(video_id, user_id)
    if video is None:
        raise NotFoundOrUnauthorized("Video", video_id)

    segments = await store.list_video_segments(video_id)
    items = []
    for segment in segments:
        item = segment.to_dict()
        item["thumbnail"] = segment.thumbnail or PLACEHOLDER_THUMBNAIL
        items.append(item)

    return {
        "video_id": video_id,
        "segments": items,
        "total_duration": segments[-1].end_time if segments else 0.0,
    }
