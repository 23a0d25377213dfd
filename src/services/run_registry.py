"""Supervision of detached pipeline runs.

Pipelines run as fire-and-forget asyncio tasks. The registry keeps a strong
reference to every task so it is not garbage collected mid-run, allows at
most one active run per video, and lets the server wait for in-flight runs
at shutdown.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from services.errors import PreconditionError

logger = logging.getLogger(__name__)


class RunRegistry:
    """Tracks background pipeline tasks keyed by video id.

    The one-run-per-video lock is in-process only; several server processes
    sharing one database do not see each other's runs.
    """

    def __init__(self):
        self._runs: dict[str, asyncio.Task] = {}

    def is_active(self, video_id: str) -> bool:
        """Check whether a run for this video is still in flight."""
        task = self._runs.get(video_id)
        return task is not None and not task.done()

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._runs.values() if not task.done())

    def dispatch(
        self,
        video_id: str,
        run: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> asyncio.Task:
        """Start run(*args) as a background task for a video.

        Args:
            video_id: Video the run belongs to
            run: Coroutine function implementing the pipeline
            *args: Arguments for run

        Returns:
            The started task

        Raises:
            PreconditionError: A run for this video is already active
        """
        if self.is_active(video_id):
            raise PreconditionError(f"A run is already in progress for video {video_id}")

        task = asyncio.create_task(run(*args), name=f"run-{video_id}")
        self._runs[video_id] = task
        task.add_done_callback(lambda t: self._on_done(video_id, t))
        logger.info(f"Dispatched {getattr(run, '__name__', 'run')} for video {video_id}")
        return task

    def _on_done(self, video_id: str, task: asyncio.Task) -> None:
        if self._runs.get(video_id) is task:
            del self._runs[video_id]

        if task.cancelled():
            logger.warning(f"Run for video {video_id} was cancelled")
            return

        error = task.exception()
        if error is not None:
            # Pipelines record their own failures; anything reaching here escaped that.
            logger.error(
                f"Run for video {video_id} raised an unhandled error: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    async def wait(self, video_id: str) -> None:
        """Wait until the current run for a video, if any, has finished."""
        task = self._runs.get(video_id)
        if task is not None:
            await asyncio.wait({task})

    async def drain(self, timeout: float = 30.0) -> int:
        """Wait for in-flight runs, giving up after timeout seconds.

        Returns:
            Number of runs still active when the wait ended
        """
        pending = {task for task in self._runs.values() if not task.done()}
        if not pending:
            return 0

        logger.info(f"Waiting up to {timeout:.0f}s for {len(pending)} pipeline runs")
        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        if still_pending:
            logger.warning(f"{len(still_pending)} pipeline runs still active after {timeout:.0f}s")
        return len(still_pending)
