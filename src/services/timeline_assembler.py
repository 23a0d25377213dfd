"""Lay resolved media clips out back-to-back on a single timeline."""

import logging
import uuid
from typing import Optional

from models.project import VideoSegment
from models.script import MediaClip, ScriptSegment

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 50


class TimelineAssembler:
    """Turns an ordered clip list into contiguous VideoSegments.

    Clips are placed in input order starting at 0 with no gaps or overlaps,
    so the segments partition [0, total duration].
    """

    def __init__(self, store=None):
        """Initialize the assembler.

        Args:
            store: VideoStore used by assemble_and_persist()
        """
        self.store = store

    def assemble(
        self,
        clips: list[MediaClip],
        segments: Optional[list[ScriptSegment]] = None,
        video_id: str = "",
    ) -> list[VideoSegment]:
        """Place clips one after another.

        Args:
            clips: Clips in narration order
            segments: Script segments the clips were resolved for, used for
                titles and descriptions
            video_id: Video the timeline belongs to

        Returns:
            One VideoSegment per clip, in the same order
        """
        narration = {segment.id: segment.text for segment in segments or []}

        timeline = []
        cursor = 0.0
        for position, clip in enumerate(clips):
            text = narration.get(clip.segment_id, "")
            start = cursor
            cursor = start + clip.duration
            timeline.append(
                VideoSegment(
                    id=str(uuid.uuid4()),
                    video_id=video_id,
                    position=position,
                    type=clip.type,
                    title=text[:MAX_TITLE_LENGTH] if text else f"Segment {position + 1}",
                    description=text,
                    url=clip.url,
                    thumbnail=clip.thumbnail,
                    start_time=start,
                    end_time=cursor,
                    keywords=list(clip.keywords),
                )
            )

        return timeline

    @staticmethod
    def total_duration(timeline: list[VideoSegment]) -> float:
        """End of the last segment, 0 for an empty timeline."""
        return timeline[-1].end_time if timeline else 0.0

    async def assemble_and_persist(
        self,
        video_id: str,
        clips: list[MediaClip],
        segments: Optional[list[ScriptSegment]] = None,
    ) -> list[VideoSegment]:
        """Assemble a timeline and replace the video's stored one with it.

        Raises:
            RuntimeError: No store was given to the assembler
        """
        if self.store is None:
            raise RuntimeError("TimelineAssembler has no store to persist to")

        timeline = self.assemble(clips, segments, video_id=video_id)
        await self.store.replace_video_segments(video_id, timeline)
        logger.info(
            f"Assembled {len(timeline)} segments for video {video_id} "
            f"({self.total_duration(timeline):.1f}s)"
        )
        return timeline
