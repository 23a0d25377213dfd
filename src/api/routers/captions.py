"""Transcription and caption routes for the Reelsmith API."""

import logging
from typing import Annotated

from api.dependencies import UserId, get_caption_pipeline, get_transcription_provider
from api.schemas import (
    CaptionResponse,
    CaptionUpdateRequest,
    LanguagesResponse,
    MessageResponse,
    RunStartedResponse,
    TranscribeRequest,
    TranscriptionResponse,
)
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from services.caption_pipeline import CaptionPipeline
from services.transcription_providers import SUPPORTED_LANGUAGES, TranscriptionProvider
from services.transcription_providers.openai_whisper import PRICE_PER_MINUTE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Captions"])

Pipeline = Annotated[CaptionPipeline, Depends(get_caption_pipeline)]


@router.post(
    "/api/videos/{video_id}/transcribe",
    response_model=RunStartedResponse,
    status_code=202,
    summary="Transcribe video",
    description=(
        "Moves an UPLOADING or PROCESSING video to TRANSCRIBING and generates captions in the background. "
        "Existing captions are replaced when the run succeeds."
    ),
    responses={404: {"description": "Video not found"}, 409: {"description": "Video cannot be transcribed now"}},
)
async def transcribe_video(
    video_id: str,
    user_id: UserId,
    pipeline: Pipeline,
    request: Annotated[TranscribeRequest | None, Body()] = None,
) -> JSONResponse:
    """Start a transcription run."""
    language = request.language if request else None
    video = await pipeline.start_transcription(user_id, video_id, language)
    return JSONResponse(
        status_code=202,
        content={"id": video.id, "status": video.status.value, "message": "Transcription started"},
    )


@router.get(
    "/api/videos/{video_id}/transcribe",
    response_model=TranscriptionResponse,
    summary="Get captions",
    responses={404: {"description": "Video not found"}},
)
async def get_transcription(video_id: str, user_id: UserId, pipeline: Pipeline) -> dict:
    """Get a video's captions in start-time order."""
    transcription = await pipeline.get_transcription(user_id, video_id)
    return {
        "video_id": video_id,
        "status": transcription["video"].status.value,
        "language": transcription["language"],
        "captions": [caption.to_dict() for caption in transcription["captions"]],
    }


@router.put(
    "/api/captions/{caption_id}",
    response_model=CaptionResponse,
    summary="Update caption",
    responses={400: {"description": "Invalid timing"}, 404: {"description": "Caption not found"}},
)
async def update_caption(
    caption_id: str, request: CaptionUpdateRequest, user_id: UserId, pipeline: Pipeline
) -> dict:
    """Edit a caption's text and/or timing."""
    caption = await pipeline.update_caption(
        user_id,
        caption_id,
        text=request.text,
        start_time=request.start_time,
        end_time=request.end_time,
    )
    return caption.to_dict()


@router.delete(
    "/api/captions/{caption_id}",
    response_model=MessageResponse,
    summary="Delete caption",
    responses={404: {"description": "Caption not found"}},
)
async def delete_caption(caption_id: str, user_id: UserId, pipeline: Pipeline) -> dict:
    """Delete a caption."""
    await pipeline.delete_caption(user_id, caption_id)
    return {"message": "Caption deleted successfully"}


@router.get("/api/transcription/languages", response_model=LanguagesResponse, summary="Transcription languages")
async def list_languages(provider: Annotated[TranscriptionProvider, Depends(get_transcription_provider)]) -> dict:
    """Languages accepted as a transcription hint, and hosted Whisper pricing."""
    return {
        "provider": provider.get_provider_name(),
        "languages": [{"code": code, "name": name} for code, name in SUPPORTED_LANGUAGES],
        "price_per_minute": PRICE_PER_MINUTE,
    }
