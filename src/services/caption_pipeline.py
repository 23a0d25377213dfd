"""Transcription-to-caption pipeline.

Starting a transcription moves the video to TRANSCRIBING right away and
hands the provider call to a background run. The run either replaces the
whole caption set and marks the video READY, or marks it ERROR and leaves
the previous captions in place.
"""

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from models.project import Caption, Video, VideoStatus
from services.errors import (
    NotFoundOrUnauthorized,
    PreconditionError,
    ProviderError,
    ReelsmithError,
    ValidationError,
)
from services.run_registry import RunRegistry
from services.transcription_providers.base import TranscriptionProvider
from services.video_store import VideoStore
from utils.logging import clear_run_context, set_run_context

logger = logging.getLogger(__name__)

TRANSCRIBABLE_STATUSES = (VideoStatus.UPLOADING, VideoStatus.PROCESSING)


class CaptionPipeline:
    """Turns speech-to-text results into a video's caption set."""

    def __init__(
        self,
        store: VideoStore,
        provider: TranscriptionProvider,
        registry: RunRegistry,
        timeout_seconds: float = 120.0,
        upload_dir: Optional[str] = None,
    ):
        """Initialize the pipeline.

        Args:
            store: Persistent store
            provider: Speech-to-text backend
            registry: Background run supervisor shared with generation
            timeout_seconds: Upper bound for one provider call
            upload_dir: Directory uploaded files live in
        """
        self.store = store
        self.provider = provider
        self.registry = registry
        self.timeout_seconds = timeout_seconds
        self.upload_dir = Path(upload_dir) if upload_dir else None

    def audio_ref_for(self, video: Video) -> str:
        """Local path of the uploaded file when present, else its URL."""
        if self.upload_dir and video.filename:
            local_path = self.upload_dir / video.filename
            if local_path.is_file():
                return str(local_path)
        return video.original_url

    async def start_transcription(self, user_id: str, video_id: str, language: Optional[str] = None) -> Video:
        """Mark a video TRANSCRIBING and transcribe it in the background.

        Raises:
            NotFoundOrUnauthorized: Video missing or not owned by the caller
            PreconditionError: Video is not UPLOADING/PROCESSING or has a run in flight
        """
        video = await self.store.get_video(video_id, user_id)
        if video is None:
            raise NotFoundOrUnauthorized("Video", video_id)

        if self.registry.is_active(video_id) or video.status not in TRANSCRIBABLE_STATUSES:
            raise PreconditionError(
                f"Video {video_id} is {video.status.value}; transcription needs UPLOADING or PROCESSING"
            )

        video = await self.store.set_status(video_id, VideoStatus.TRANSCRIBING, expected=TRANSCRIBABLE_STATUSES)
        self.registry.dispatch(video_id, self.run_transcription, video_id, self.audio_ref_for(video), language)
        return video

    async def run_transcription(self, video_id: str, audio_ref: str, language: Optional[str] = None) -> None:
        """Transcribe a TRANSCRIBING video and store its captions.

        Never raises: any failure moves the video to ERROR.
        """
        set_run_context(video_id)
        try:
            result = await asyncio.wait_for(
                self.provider.transcribe(audio_ref, language), timeout=self.timeout_seconds
            )

            problems = result.validation_errors()
            if problems:
                raise ProviderError(f"Malformed transcription: {problems[0]}")

            captions = [
                Caption(
                    id=str(uuid.uuid4()),
                    video_id=video_id,
                    text=segment.text.strip(),
                    start_time=segment.start,
                    end_time=segment.end,
                    language=result.language,
                )
                for segment in result.segments
            ]
            await self.store.replace_captions(video_id, captions)

            artifacts = {"duration": result.duration} if result.segments else {}
            await self.store.set_status(video_id, VideoStatus.READY, **artifacts)
            logger.info(f"Transcription finished for video {video_id}: {len(captions)} captions")

        except asyncio.TimeoutError:
            logger.error(f"Transcription timed out after {self.timeout_seconds:.0f}s for video {video_id}")
            await self._mark_error(video_id)
        except ProviderError as e:
            logger.error(f"Transcription failed for video {video_id}: {e}")
            await self._mark_error(video_id)
        except Exception as e:
            logger.error(f"Transcription failed for video {video_id}: {e}", exc_info=True)
            await self._mark_error(video_id)
        finally:
            clear_run_context()

    async def get_transcription(self, user_id: str, video_id: str) -> dict[str, Any]:
        """Get a video with its captions in start-time order.

        Returns:
            Dict with video, captions and language (first caption's, "en" when none)
        """
        video = await self.store.get_video(video_id, user_id)
        if video is None:
            raise NotFoundOrUnauthorized("Video", video_id)

        captions = await self.store.list_captions(video_id)
        return {
            "video": video,
            "captions": captions,
            "language": captions[0].language if captions else "en",
        }

    async def update_caption(
        self,
        user_id: str,
        caption_id: str,
        text: Optional[str] = None,
        start_time: Optional[float] = None,
        end_time: Optional[float] = None,
    ) -> Caption:
        """Edit a caption's text and/or timing.

        Raises:
            NotFoundOrUnauthorized: Caption missing or on someone else's video
            ValidationError: The edit would leave end_time <= start_time
        """
        caption = await self.store.get_caption(caption_id, user_id)
        if caption is None:
            raise NotFoundOrUnauthorized("Caption", caption_id)

        if text is not None:
            caption.text = text.strip()
        if start_time is not None:
            caption.start_time = start_time
        if end_time is not None:
            caption.end_time = end_time

        if caption.start_time < 0 or caption.end_time <= caption.start_time:
            raise ValidationError("Caption end time must be after its start time")

        return await self.store.update_caption(caption)

    async def delete_caption(self, user_id: str, caption_id: str) -> None:
        """Delete a caption from a video the caller owns."""
        caption = await self.store.get_caption(caption_id, user_id)
        if caption is None:
            raise NotFoundOrUnauthorized("Caption", caption_id)
        await self.store.delete_caption(caption_id)

    async def _mark_error(self, video_id: str) -> None:
        try:
            await self.store.set_status(video_id, VideoStatus.ERROR)
        except ReelsmithError as e:
            logger.warning(f"Could not mark video {video_id} as ERROR: {e}")
