"""Script-to-video generation routes for the Reelsmith API."""

import logging
from typing import Annotated

from api.dependencies import UserId, get_generation_orchestrator
from api.schemas import GenerateVideoRequest, RegenerateRequest, RunStartedResponse
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from services.generation_orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])

Orchestrator = Annotated[GenerationOrchestrator, Depends(get_generation_orchestrator)]


@router.post(
    "/api/ai/generate-video",
    response_model=RunStartedResponse,
    status_code=202,
    summary="Generate video from script",
    description=(
        "Creates a PROCESSING video and assembles its stock media timeline in the background. "
        "Poll GET /api/videos/{id} until the status is READY or ERROR."
    ),
    responses={400: {"description": "Missing project id or script"}, 404: {"description": "Project not found"}},
)
async def generate_video(request: GenerateVideoRequest, user_id: UserId, orchestrator: Orchestrator) -> JSONResponse:
    """Start a generation run."""
    video = await orchestrator.start_generation(user_id, request.project_id, request.script)
    return JSONResponse(
        status_code=202,
        content={"id": video.id, "status": video.status.value, "message": "Video generation started"},
    )


@router.post(
    "/api/videos/{video_id}/regenerate",
    response_model=RunStartedResponse,
    status_code=202,
    summary="Regenerate video",
    description="Restarts generation for a READY or ERROR video, with a new script or the project's script.",
    responses={
        400: {"description": "No script available"},
        404: {"description": "Video not found"},
        409: {"description": "Video is mid-run"},
    },
)
async def regenerate_video(
    video_id: str,
    user_id: UserId,
    orchestrator: Orchestrator,
    request: Annotated[RegenerateRequest | None, Body()] = None,
) -> JSONResponse:
    """Start a new generation run for an existing video."""
    script = request.script if request else None
    video = await orchestrator.regenerate(user_id, video_id, script)
    return JSONResponse(
        status_code=202,
        content={"id": video.id, "status": video.status.value, "message": "Video regeneration started"},
    )
