"""Script-to-timeline generation runs.

A run is started synchronously (validation, ownership check, a PROCESSING
video record) and then completes in the background:

    segment -> resolve all -> assemble + persist -> READY

Any failure along the way leaves the video in ERROR. Timeline segments
written before a failure are kept; they are only read once the video is READY.
"""

import logging
import time
from typing import Optional

from models.project import Video, VideoStatus
from services.errors import (
    NotFoundOrUnauthorized,
    PipelineFatal,
    PreconditionError,
    ReelsmithError,
    ValidationError,
)
from services.media_resolver import StockMediaResolver
from services.run_registry import RunRegistry
from services.script_segmenter import ScriptSegmenter
from services.timeline_assembler import TimelineAssembler
from services.video_store import VideoStore
from utils.logging import clear_run_context, set_run_context

logger = logging.getLogger(__name__)

GENERATED_VIDEO_TITLE = "AI Generated Video from Script"
SCRIPT_PREVIEW_LENGTH = 100


class GenerationOrchestrator:
    """Starts and runs script-to-timeline generation for videos."""

    def __init__(
        self,
        store: VideoStore,
        resolver: StockMediaResolver,
        registry: RunRegistry,
        segmenter: Optional[ScriptSegmenter] = None,
        assembler: Optional[TimelineAssembler] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.registry = registry
        self.segmenter = segmenter or ScriptSegmenter()
        self.assembler = assembler or TimelineAssembler(store)

    async def start_generation(self, user_id: str, project_id: str, script: str) -> Video:
        """Create a PROCESSING video for a script and generate it in the background.

        Args:
            user_id: Caller
            project_id: Project the video belongs to
            script: Narration script

        Returns:
            The new video record, still PROCESSING

        Raises:
            ValidationError: Missing project id or blank script
            NotFoundOrUnauthorized: Project missing or not owned by the caller
        """
        if not project_id:
            raise ValidationError("Project ID is required")
        if not script or not script.strip():
            raise ValidationError("Script is required")

        project = await self.store.get_project(project_id, user_id)
        if project is None:
            raise NotFoundOrUnauthorized("Project", project_id)

        video = await self.store.create_video(
            user_id=user_id,
            project_id=project.id,
            title=GENERATED_VIDEO_TITLE,
            description=f'Generated from script: "{script[:SCRIPT_PREVIEW_LENGTH]}..."',
            filename=f"ai_video_{int(time.time() * 1000)}.mp4",
            status=VideoStatus.PROCESSING,
        )

        self.registry.dispatch(video.id, self.run_generation, video.id, script)
        return video

    async def regenerate(self, user_id: str, video_id: str, script: Optional[str] = None) -> Video:
        """Run generation again for a finished video.

        Args:
            user_id: Caller
            video_id: READY or ERROR video to regenerate
            script: New script; the project's stored script when omitted

        Returns:
            The video, back in PROCESSING

        Raises:
            NotFoundOrUnauthorized: Video missing or not owned by the caller
            PreconditionError: Video is mid-run or not in a terminal state
            ValidationError: No script given and none stored on the project
        """
        video = await self.store.get_video(video_id, user_id)
        if video is None:
            raise NotFoundOrUnauthorized("Video", video_id)

        if self.registry.is_active(video_id) or not video.status.is_terminal:
            raise PreconditionError(
                f"Video {video_id} is {video.status.value}; only READY or ERROR videos can be regenerated"
            )

        if not script or not script.strip():
            project = await self.store.get_project(video.project_id, user_id)
            script = project.script if project else None
        if not script or not script.strip():
            raise ValidationError("Script is required")

        video = await self.store.restart_video(video_id)
        self.registry.dispatch(video_id, self.run_generation, video_id, script)
        return video

    async def run_generation(self, video_id: str, script: str) -> None:
        """Generate the timeline for a PROCESSING video.

        Never raises: any failure moves the video to ERROR.
        """
        set_run_context(video_id)
        stage = "segment"
        try:
            segments = self.segmenter.segment(script)
            logger.info(f"Segmented script into {len(segments)} segments")

            stage = "resolve"
            clips = await self.resolver.resolve_all(segments)

            stage = "assemble"
            timeline = await self.assembler.assemble_and_persist(video_id, clips, segments)

            stage = "finalize"
            total_duration = self.assembler.total_duration(timeline)
            artifact_url = timeline[0].url if timeline else ""
            if not timeline:
                logger.warning(f"No media resolved for video {video_id}; finishing with an empty timeline")

            await self.store.set_status(
                video_id,
                VideoStatus.READY,
                original_url=artifact_url,
                processed_url=artifact_url,
                duration=total_duration,
            )
            logger.info(f"Generation finished for video {video_id}: {len(timeline)} segments, {total_duration:.1f}s")

        except Exception as e:
            fatal = PipelineFatal(stage, e)
            logger.error(f"Generation failed for video {video_id}: {fatal}", exc_info=True)
            await self._mark_error(video_id)
        finally:
            clear_run_context()

    async def _mark_error(self, video_id: str) -> None:
        try:
            await self.store.set_status(video_id, VideoStatus.ERROR)
        except ReelsmithError as e:
            # Typically the video was deleted while the run was in flight
            logger.warning(f"Could not mark video {video_id} as ERROR: {e}")
